"""
Gemini API client for Sentinel
Sends prompts to the generateContent endpoint with the credential attached
"""

import logging
from typing import Any, Dict, List, Optional

from .config import SentinelConfig
from .errors import SentinelError, UpstreamError
from .http_client import HTTPClient

API_KEY_HEADER = "x-goog-api-key"


class GeminiClient:
    """Server-side client for the Gemini generative language API."""

    def __init__(self, config: SentinelConfig, http_client: Optional[HTTPClient] = None):
        self.config = config
        self.http = http_client or HTTPClient(timeout=config.timeout, user_agent=config.user_agent)
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        await self.http.close()

    def build_payload(self, prompt: str, max_output_tokens: Optional[int] = None) -> Dict[str, Any]:
        """Wrap ``prompt`` in a generateContent request envelope."""
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_output_tokens or self.config.max_output_tokens,
                "temperature": self.config.temperature,
                "topP": self.config.top_p,
            },
        }

    async def generate(self, prompt: str, max_output_tokens: Optional[int] = None) -> Dict[str, Any]:
        """Send one generation request and return the raw response envelope.

        The credential is checked before anything goes on the wire; the
        request is not retried.
        """
        api_key = self.config.require_api_key()

        self.logger.info(f"Requesting analysis from {self.config.gemini_model} ({len(prompt)} prompt chars)")
        response = await self.http.post_json(
            self.config.generate_endpoint,
            self.build_payload(prompt, max_output_tokens),
            headers={API_KEY_HEADER: api_key},
        )

        if not response.is_success:
            self.logger.error(f"Gemini API Error: {response.status_code} {response.text[:500]}")
            raise UpstreamError(
                response.status_code,
                f"Gemini API failed: {response.reason or response.error_message}",
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise SentinelError("Gemini API returned a non-JSON response") from e

    async def list_models(self) -> List[str]:
        """Return the Gemini model names available to the configured key."""
        api_key = self.config.require_api_key()

        response = await self.http.get(self.config.models_endpoint, headers={API_KEY_HEADER: api_key})
        if not response.is_success:
            raise UpstreamError(response.status_code, f"Gemini API failed: {response.error_message}")

        try:
            models = response.json().get("models", [])
        except (ValueError, AttributeError) as e:
            raise SentinelError("Gemini API returned a malformed model list") from e

        names = []
        for model in models:
            name = str(model.get("name", ""))
            if "gemini" in name:
                names.append(name.replace("models/", "", 1))
        return names
