"""
Error types for Sentinel

Every failure that crosses an operation boundary is one of these, so the
server, the CLI and the analysis session can all render it as the same
``{"error": message}`` shape.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SentinelError(Exception):
    """Base class for all Sentinel failures."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(SentinelError):
    """Server-side configuration is incomplete (e.g. no model credential).

    The client only ever sees the generic message; ``detail`` is for logs.
    """

    status_code = 500
    default_message = "Server configuration error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__()


class UpstreamError(SentinelError):
    """An upstream API (Gemini or Sui GraphQL) answered with a non-2xx status."""

    default_message = "Upstream request failed"

    def __init__(self, status_code: int, message: Optional[str] = None, body: str = "") -> None:
        self.body = body
        super().__init__(message, status_code=status_code)


class ParseError(SentinelError):
    """The model response could not be turned into an analysis, even after recovery."""

    status_code = 500
    default_message = "Failed to parse analysis results"


class ValidationError(SentinelError):
    """Caller input was missing or empty."""

    status_code = 400
    default_message = "Invalid request"
