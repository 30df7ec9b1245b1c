"""
Sentinel Core Components
Prompting, proxying, parsing, scoring and analysis state
"""

from .analyzer import ContractAnalyzer
from .config import SentinelConfig
from .errors import ConfigurationError, ParseError, SentinelError, UpstreamError, ValidationError
from .model import AnalysisResult, AnalysisState, VulnerabilityFinding, SEVERITY_WEIGHTS
from .parser import parse_analysis_response
from .proxy import ProxyService, RemoteProxy
from .scoring import calculate_security_score
from .session import AnalysisSession

__all__ = [
    "ContractAnalyzer",
    "SentinelConfig",
    "SentinelError",
    "ConfigurationError",
    "ParseError",
    "UpstreamError",
    "ValidationError",
    "AnalysisResult",
    "AnalysisState",
    "VulnerabilityFinding",
    "SEVERITY_WEIGHTS",
    "parse_analysis_response",
    "ProxyService",
    "RemoteProxy",
    "calculate_security_score",
    "AnalysisSession",
]
