"""
Proxy layer for Sentinel

``ProxyService`` is what the HTTP server runs: it turns contract source into
a prompt and relays it to Gemini with the server-held credential, and relays
GraphQL queries to Sui. ``RemoteProxy`` is the client side of the same
contract, used when the CLI talks to a running ``sentinel serve``.
Both expose ``analyze``, ``fix`` and ``sui_query``.
"""

import logging
from typing import Any, Dict, Optional

from .config import SentinelConfig
from .errors import SentinelError, UpstreamError, ValidationError
from .gemini import GeminiClient
from .http_client import HTTPClient
from .model import VulnerabilityFinding
from .prompt import build_analysis_prompt, build_fix_prompt
from .sui import SuiGraphQLClient


def require_code(code: Any) -> str:
    if not isinstance(code, str) or not code.strip():
        raise ValidationError("Contract code is required")
    return code


class ProxyService:
    """In-process proxy holding the model credential."""

    def __init__(self,
                 config: SentinelConfig,
                 gemini: Optional[GeminiClient] = None,
                 sui: Optional[SuiGraphQLClient] = None,
                 http_client: Optional[HTTPClient] = None):
        self.config = config
        http = http_client or HTTPClient(timeout=config.timeout, user_agent=config.user_agent)
        self.gemini = gemini or GeminiClient(config, http)
        self.sui = sui or SuiGraphQLClient(config, http)
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self) -> "ProxyService":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        await self.gemini.close()
        await self.sui.close()

    async def analyze(self, code: Any) -> Dict[str, Any]:
        """Build the analysis prompt for ``code`` and return Gemini's envelope."""
        code = require_code(code)
        self.logger.info(f"Analyzing contract ({len(code)} chars)")
        prompt = build_analysis_prompt(code, include_examples=self.config.prompt_examples)
        return await self.gemini.generate(prompt)

    async def fix(self, vulnerability: Dict[str, Any]) -> Dict[str, Any]:
        """Ask Gemini for a corrected version of one finding's code."""
        if not isinstance(vulnerability, dict) or not vulnerability.get("code_snippet"):
            raise ValidationError("Vulnerability with code_snippet is required")
        prompt = build_fix_prompt(VulnerabilityFinding.from_dict(vulnerability))
        return await self.gemini.generate(prompt, max_output_tokens=self.config.fix_max_output_tokens)

    async def sui_query(self, query: Any, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Query is required")
        return await self.sui.query(query, variables)


class RemoteProxy:
    """Client for a Sentinel proxy server (``/api/analyze``, ``/api/fix``, ``/api/sui``)."""

    def __init__(self, base_url: str, http_client: Optional[HTTPClient] = None, timeout: int = 120):
        self.base_url = base_url.rstrip("/")
        self.http = http_client or HTTPClient(timeout=timeout)

    async def __aenter__(self) -> "RemoteProxy":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        await self.http.close()

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.http.post_json(f"{self.base_url}{path}", body)
        if not response.is_success:
            raise UpstreamError(response.status_code, response.error_message)
        try:
            return response.json()
        except ValueError as e:
            raise SentinelError(f"Proxy returned a non-JSON response from {path}") from e

    async def analyze(self, code: Any) -> Dict[str, Any]:
        return await self._post("/api/analyze", {"code": require_code(code)})

    async def fix(self, vulnerability: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/api/fix", {"vulnerability": vulnerability})

    async def sui_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._post("/api/sui", {"query": query, "variables": variables})
