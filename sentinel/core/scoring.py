"""
Score Calculator for Sentinel
Deterministic fallback score used when the model does not return one
"""

from typing import Any, Iterable, Mapping, Optional

from .model import SEVERITY_WEIGHTS, normalize_severity

MAX_SCORE = 100
MIN_SCORE = 0


def _severity_of(finding: Any) -> str:
    if isinstance(finding, Mapping):
        return normalize_severity(finding.get("severity"))
    return normalize_severity(getattr(finding, "severity", ""))


def calculate_security_score(findings: Optional[Iterable[Any]],
                             weights: Mapping[str, int] = SEVERITY_WEIGHTS) -> int:
    """Return 100 minus the summed severity weights of ``findings``, floored at 0.

    Findings may be VulnerabilityFinding objects or plain dicts. A severity
    missing from ``weights`` deducts nothing.
    """
    deductions = sum(weights.get(_severity_of(finding), 0) for finding in findings or ())
    return max(MIN_SCORE, MAX_SCORE - deductions)


def coerce_score(value: Any) -> Optional[int]:
    """Interpret a model-provided score, or None if it is not a usable number."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None
    return max(MIN_SCORE, min(MAX_SCORE, score))
