"""
Core models for Sentinel

Defines the dataclasses shared by the parser, the analyzer, the session and
the report writers.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


# Point deductions per finding severity, used when the model gives no score
SEVERITY_WEIGHTS: Mapping[str, int] = MappingProxyType({
    "Critical": 30,
    "High": 20,
    "Medium": 10,
    "Low": 5,
})

_SEVERITY_ALIASES = {
    "critical": "Critical",
    "high": "High",
    "medium": "Medium",
    "moderate": "Medium",
    "low": "Low",
}

_CONFIDENCE_ALIASES = {
    "high": "High",
    "medium": "Medium",
    "low": "Low",
}


def normalize_severity(value: Any) -> str:
    """Return the canonical capitalization of a severity, or the value as given."""
    text = str(value or "").strip()
    return _SEVERITY_ALIASES.get(text.lower(), text)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class AnalysisState:
    """Display states of an analysis view."""

    EMPTY = "empty"
    LOADING = "loading"
    RESULTS = "results"
    ERROR = "error"


@dataclass(frozen=True)
class VulnerabilityFinding:
    """One vulnerability reported by the model.

    The model output is not validated beyond shape: unknown severities and
    categories are kept verbatim so nothing the model said is lost.
    """

    severity: str
    type: str = ""
    location: str = ""
    title: str = ""
    description: str = ""
    code_snippet: str = ""
    fix: str = ""
    confidence: str = ""

    # Older prompt variants ask for these per finding
    attack_scenario: str = ""
    mermaid_diagram: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VulnerabilityFinding":
        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        confidence = text("confidence").strip()
        return cls(
            severity=normalize_severity(data.get("severity")),
            type=text("type"),
            location=text("location"),
            title=text("title"),
            description=text("description"),
            code_snippet=text("code_snippet"),
            fix=text("fix"),
            confidence=_CONFIDENCE_ALIASES.get(confidence.lower(), confidence),
            attack_scenario=text("attack_scenario"),
            mermaid_diagram=text("mermaid_diagram"),
        )

    def to_dict(self) -> Dict[str, str]:
        data = {
            "severity": self.severity,
            "type": self.type,
            "location": self.location,
            "title": self.title,
            "description": self.description,
            "code_snippet": self.code_snippet,
            "fix": self.fix,
            "confidence": self.confidence,
        }
        if self.attack_scenario:
            data["attack_scenario"] = self.attack_scenario
        if self.mermaid_diagram:
            data["mermaid_diagram"] = self.mermaid_diagram
        return data


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis request. Immutable once created."""

    score: int
    summary: str
    vulnerabilities: Tuple[VulnerabilityFinding, ...] = ()
    recommendations: Tuple[str, ...] = ()
    attack_diagram: Optional[str] = None
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def severity_counts(self) -> Dict[str, int]:
        counts = {severity: 0 for severity in SEVERITY_WEIGHTS}
        for finding in self.vulnerabilities:
            counts[finding.severity] = counts.get(finding.severity, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "score": self.score,
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "summary": self.summary,
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp,
        }
        if self.attack_diagram:
            data["attack_diagram"] = self.attack_diagram
        return data

    def to_report(self) -> Dict[str, Any]:
        """Exported report shape; the export time replaces the analysis time."""
        return {
            "timestamp": utc_timestamp(),
            "score": self.score,
            "summary": self.summary,
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        return cls(
            score=int(data.get("score", 100)),
            summary=str(data.get("summary", "")),
            vulnerabilities=findings_from_dicts(data.get("vulnerabilities") or []),
            recommendations=tuple(str(r) for r in data.get("recommendations") or []),
            attack_diagram=data.get("attack_diagram") or None,
            timestamp=str(data.get("timestamp") or utc_timestamp()),
        )


@dataclass
class HistoryEntry:
    """A past analysis kept in the bounded history list."""

    id: str
    timestamp: str
    code: str
    results: AnalysisResult

    SNIPPET_LENGTH = 200

    @classmethod
    def create(cls, code: str, results: AnalysisResult) -> "HistoryEntry":
        return cls(
            id=str(int(time.time() * 1000)),
            timestamp=utc_timestamp(),
            code=code[:cls.SNIPPET_LENGTH],
            results=results,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "code": self.code,
            "results": self.results.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            timestamp=str(data.get("timestamp", "")),
            code=str(data.get("code", "")),
            results=AnalysisResult.from_dict(data.get("results") or {}),
        )


@dataclass
class FixSuggestion:
    """Model-generated remediation for a single finding."""

    fixed_code: str
    explanation: str = ""
    additional_notes: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FixSuggestion":
        return cls(
            fixed_code=str(data.get("fixed_code", "")),
            explanation=str(data.get("explanation", "")),
            additional_notes=str(data.get("additional_notes", "")),
        )


def findings_from_dicts(items: List[Any]) -> Tuple[VulnerabilityFinding, ...]:
    return tuple(VulnerabilityFinding.from_dict(item) for item in items if isinstance(item, dict))
