"""
Contract Analyzer for Sentinel
Runs one prompt -> proxy call -> parse -> score cycle
"""

import logging
from typing import Any, Dict

from .errors import ValidationError
from .model import AnalysisResult, FixSuggestion, VulnerabilityFinding, findings_from_dicts
from .parser import extract_candidate_text, parse_analysis_response, parse_fix_response
from .scoring import calculate_security_score, coerce_score


class ContractAnalyzer:
    """Analyzes contract source through a proxy backend.

    ``backend`` is a ProxyService (credential held in-process) or a
    RemoteProxy (credential held by a running server).
    """

    def __init__(self, backend):
        self.backend = backend
        self.logger = logging.getLogger(__name__)

    async def analyze_contract(self, code: str) -> AnalysisResult:
        """Analyze ``code`` and return the scored result.

        The model's own score wins when it gives one; otherwise the score is
        derived from the findings' severities.
        """
        if not code or not code.strip():
            raise ValidationError("Contract code is required")

        envelope = await self.backend.analyze(code)
        parsed = parse_analysis_response(extract_candidate_text(envelope))
        return self.build_result(parsed)

    def build_result(self, parsed: Dict[str, Any]) -> AnalysisResult:
        vulnerabilities = findings_from_dicts(parsed.get("vulnerabilities") or [])

        score = coerce_score(parsed.get("score"))
        if score is None:
            score = calculate_security_score(vulnerabilities)
            self.logger.debug(f"Model returned no score; computed {score} from {len(vulnerabilities)} findings")

        return AnalysisResult(
            score=score,
            summary=str(parsed.get("summary") or ""),
            vulnerabilities=vulnerabilities,
            recommendations=tuple(str(r) for r in parsed.get("recommendations") or []),
            attack_diagram=parsed.get("attack_diagram") or None,
        )

    async def generate_fix(self, finding: VulnerabilityFinding) -> FixSuggestion:
        """Ask the model for a corrected version of ``finding``'s code."""
        envelope = await self.backend.fix(finding.to_dict())
        return FixSuggestion.from_dict(parse_fix_response(extract_candidate_text(envelope)))
