"""
HTTP Client for Sentinel
Thin wrapper around httpx.AsyncClient with response capture and request logging
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from sentinel.utils.logger import request_logger

from .errors import SentinelError


@dataclass
class Response:
    """Captured response with the metadata the proxies need."""
    status_code: int
    headers: Dict[str, str]
    text: str
    url: str
    elapsed: float
    reason: str = ""

    def json(self) -> Any:
        """Parse response body as JSON."""
        return json.loads(self.text)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error_message(self) -> str:
        """Best-effort ``error`` field of a JSON error body, else the reason phrase."""
        try:
            body = self.json()
        except ValueError:
            return self.reason or self.text
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                return str(error.get("message") or self.reason)
            return str(error)
        return self.reason or self.text


class HTTPClient:
    """Async HTTP client shared by the Gemini and Sui clients.

    Requests are never retried: a failed call surfaces to the caller as is.
    """

    def __init__(self,
                 timeout: int = 120,
                 user_agent: str = "Sentinel-Analyzer/1.0",
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = logging.getLogger(__name__)

        # Session configuration
        self.session_config: Dict[str, Any] = {
            "timeout": httpx.Timeout(timeout),
            "follow_redirects": True,
        }
        if transport is not None:
            self.session_config["transport"] = transport

        self._session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> httpx.AsyncClient:
        """Ensure HTTP session is initialized."""
        if self._session is None:
            self._session = httpx.AsyncClient(
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                **self.session_config
            )
        return self._session

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.aclose()
            self._session = None

    async def request(self,
                      method: str,
                      url: str,
                      headers: Optional[Dict[str, str]] = None,
                      json_body: Any = None,
                      params: Optional[Dict[str, str]] = None) -> Response:
        """Make one HTTP request and capture the response."""
        session = await self._ensure_session()
        request_headers = dict(headers or {})
        if json_body is not None:
            request_headers.setdefault("Content-Type", "application/json")

        payload = json.dumps(json_body) if json_body is not None else None
        request_logger.log_request(method, url, request_headers, payload)

        start_time = time.time()
        try:
            response = await session.request(
                method=method,
                url=url,
                headers=request_headers,
                params=params,
                content=payload,
            )
        except httpx.TimeoutException as e:
            self.logger.error(f"Timeout for {method} {url}: {e}")
            raise SentinelError(f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            self.logger.error(f"Network error for {method} {url}: {e}")
            raise SentinelError(f"Network request failed: {e}") from e

        elapsed_time = time.time() - start_time
        request_logger.log_response(url, response.status_code, response.text, elapsed_time)

        return Response(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
            url=str(response.url),
            elapsed=elapsed_time,
            reason=response.reason_phrase,
        )

    async def get(self,
                  url: str,
                  headers: Optional[Dict[str, str]] = None,
                  params: Optional[Dict[str, str]] = None) -> Response:
        """Make GET request."""
        return await self.request("GET", url, headers=headers, params=params)

    async def post_json(self,
                        url: str,
                        body: Any,
                        headers: Optional[Dict[str, str]] = None) -> Response:
        """Make POST request with a JSON body."""
        return await self.request("POST", url, headers=headers, json_body=body)
