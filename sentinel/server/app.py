"""
HTTP proxy server for Sentinel

Keeps the model credential on the server: browsers and remote CLIs post
contract code here and never see the key.

    POST /api/analyze  {"code": "..."}                -> Gemini response envelope
    POST /api/fix      {"vulnerability": {...}}       -> Gemini response envelope
    POST /api/sui      {"query": "...", "variables"}  -> Sui GraphQL response

Every failure is answered as {"error": message} with a matching status.
"""

import logging
from typing import Callable, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from sentinel.core.config import SentinelConfig
from sentinel.core.errors import SentinelError
from sentinel.core.proxy import ProxyService

ProxyFactory = Callable[[], ProxyService]

logger = logging.getLogger(__name__)


def json_body() -> dict:
    """Request body as a dict; anything else (missing, invalid, array, scalar) reads as empty."""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(config: SentinelConfig, proxy_factory: Optional[ProxyFactory] = None) -> Flask:
    """Build the proxy application around an injected configuration.

    ``proxy_factory`` returns a fresh ProxyService per request, since each
    async view runs on its own event loop.
    """
    app = Flask(__name__)
    app.config["SENTINEL"] = config
    make_proxy = proxy_factory or (lambda: ProxyService(config))

    if not config.has_credential:
        logger.warning("GEMINI_API_KEY is not configured; /api/analyze will answer 500")

    @app.errorhandler(SentinelError)
    def handle_sentinel_error(error: SentinelError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return jsonify({"error": error.description}), error.code
        logger.exception(f"Handler Error: {error}")
        return jsonify({"error": str(error) or "Internal Server Error"}), 500

    @app.route("/api/analyze", methods=["POST"])
    async def analyze():
        body = json_body()
        async with make_proxy() as proxy:
            envelope = await proxy.analyze(body.get("code"))
        return jsonify(envelope), 200

    @app.route("/api/fix", methods=["POST"])
    async def fix():
        body = json_body()
        async with make_proxy() as proxy:
            envelope = await proxy.fix(body.get("vulnerability"))
        return jsonify(envelope), 200

    @app.route("/api/sui", methods=["POST"])
    async def sui():
        body = json_body()
        async with make_proxy() as proxy:
            data = await proxy.sui_query(body.get("query"), body.get("variables"))
        return jsonify(data), 200

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "model": config.gemini_model, "configured": config.has_credential}), 200

    return app
