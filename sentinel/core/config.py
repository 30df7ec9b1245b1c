"""
Configuration for Sentinel

Settings are collected once at start-up into a ``SentinelConfig`` and passed
to the proxy, the server and the CLI. Nothing reads the process environment
at call time.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_SUI_GRAPHQL_ENDPOINT = "https://sui-mainnet.mystenlabs.com/graphql"

# Looked up in this order; earlier files win
DEFAULT_ENV_FILES = (".env.local", ".env")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentinelConfig:
    """Runtime settings for the model proxy and the chain-data proxy."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    max_output_tokens: int = 8192
    fix_max_output_tokens: int = 2048
    temperature: float = 1.0
    top_p: float = 0.95
    sui_graphql_endpoint: str = DEFAULT_SUI_GRAPHQL_ENDPOINT
    timeout: int = 120
    user_agent: str = "Sentinel-Analyzer/1.0"
    history_file: Optional[str] = None
    history_limit: int = 10
    # Embed each knowledge-base pattern's vulnerable and secure code in the prompt
    prompt_examples: bool = False

    @property
    def generate_endpoint(self) -> str:
        return f"{self.gemini_base_url.rstrip('/')}/models/{self.gemini_model}:generateContent"

    @property
    def models_endpoint(self) -> str:
        return f"{self.gemini_base_url.rstrip('/')}/models"

    @property
    def has_credential(self) -> bool:
        return bool(self.gemini_api_key)

    def require_api_key(self) -> str:
        """Return the model credential or fail as a configuration error."""
        if not self.gemini_api_key:
            logger.error("Server Configuration Error: GEMINI_API_KEY is missing")
            raise ConfigurationError("GEMINI_API_KEY is missing")
        return self.gemini_api_key

    def with_overrides(self, **changes) -> "SentinelConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SentinelConfig":
        """Build a config from dotenv files and the process environment."""
        candidates = [env_file] if env_file else list(DEFAULT_ENV_FILES)
        for candidate in candidates:
            path = Path(candidate)
            if path.is_file():
                load_dotenv(path, override=False)
                logger.debug(f"Loaded environment from {path}")

        timeout = os.getenv("SENTINEL_TIMEOUT")
        try:
            timeout_seconds = int(timeout) if timeout else cls.timeout
        except ValueError as e:
            logger.error(f"Invalid SENTINEL_TIMEOUT: {timeout!r}")
            raise ConfigurationError(f"SENTINEL_TIMEOUT must be an integer, got {timeout!r}") from e

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
            sui_graphql_endpoint=os.getenv("SUI_GRAPHQL_ENDPOINT", DEFAULT_SUI_GRAPHQL_ENDPOINT),
            timeout=timeout_seconds,
            history_file=os.getenv("SENTINEL_HISTORY_FILE") or None,
            prompt_examples=os.getenv("SENTINEL_PROMPT_EXAMPLES", "").strip().lower() in ("1", "true", "yes"),
        )
