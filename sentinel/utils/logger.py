"""
Logger Utility for Sentinel
Provides consistent logging configuration and request logging
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

# Headers whose values must never reach a log file
SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-goog-api-key"}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def setup_logger(verbosity: int = 1,
                 log_file: Optional[str] = None,
                 logger_name: str = "sentinel",
                 console: Optional[Console] = None) -> logging.Logger:
    """Set up logger with rich console output and optional file output."""

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=(verbosity >= 2),
        rich_tracebacks=True,
        markup=False
    )
    if verbosity <= 0:
        console_handler.setLevel(logging.WARNING)
    else:
        console_handler.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

        logger.debug(f"Detailed logs saved to: {log_path}")

    # Suppress overly verbose third-party loggers unless in debug
    for name in ("httpx", "httpcore", "asyncio", "werkzeug"):
        logging.getLogger(name).setLevel(logging.WARNING if verbosity < 2 else logging.INFO)

    return logger


def redact_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``headers`` with credential values replaced."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in (headers or {}).items()
    }


class RequestLogger:
    """Logger for outbound HTTP requests and responses."""

    def __init__(self, logger_name: str = "sentinel.requests", max_body_size: int = 1000):
        self.max_body_size = max_body_size
        self.logger = logging.getLogger(logger_name)

    def _truncate(self, body: Optional[str]) -> Optional[str]:
        if body and len(body) > self.max_body_size:
            return body[:self.max_body_size] + "... (truncated)"
        return body

    def log_request(self, method: str, url: str, headers: dict,
                    data: Optional[str] = None):
        """Log HTTP request details with credentials redacted."""
        self.logger.debug(
            f"REQUEST - {method} {url} - "
            f"Headers: {redact_headers(headers)} - "
            f"Data: {self._truncate(data) or 'None'}"
        )

    def log_response(self, url: str, status_code: int,
                     body: Optional[str] = None, elapsed: Optional[float] = None):
        """Log HTTP response details."""
        log_message = f"RESPONSE - {url} - Status: {status_code} - Body: {self._truncate(body) or 'None'}"
        if elapsed is not None:
            log_message += f" - Elapsed: {elapsed:.3f}s"
        self.logger.debug(log_message)


request_logger = RequestLogger()
