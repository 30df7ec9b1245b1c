"""
Test suite for the Gemini client and the proxy layer
"""

import json

import httpx
import pytest

from sentinel.core.config import SentinelConfig
from sentinel.core.errors import ConfigurationError, SentinelError, UpstreamError, ValidationError
from sentinel.core.gemini import API_KEY_HEADER, GeminiClient
from sentinel.core.http_client import HTTPClient
from sentinel.core.proxy import ProxyService, RemoteProxy
from sentinel.data.knowledge_base import KNOWLEDGE_BASE


ENVELOPE = {"candidates": [{"content": {"parts": [{"text": '{"summary": "ok"}'}]}}]}


class RecordingTransport:
    """Collects outgoing requests and answers with a fixed handler."""

    def __init__(self, handler):
        self.requests = []
        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> HTTPClient:
        return HTTPClient(timeout=5, transport=httpx.MockTransport(self))


@pytest.fixture
def config():
    return SentinelConfig(gemini_api_key="test-key", gemini_base_url="https://llm.test/v1beta")


class TestGeminiClient:
    """Test cases for generateContent requests."""

    @pytest.mark.asyncio
    async def test_generate_payload_and_header(self, config):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        client = GeminiClient(config, transport.client())

        envelope = await client.generate("audit this")
        await client.close()

        assert envelope == ENVELOPE
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.test/v1beta/models/gemini-2.5-flash:generateContent"
        assert request.headers[API_KEY_HEADER] == "test-key"
        body = json.loads(request.content)
        assert body["contents"] == [{"parts": [{"text": "audit this"}]}]
        assert body["generationConfig"] == {"maxOutputTokens": 8192, "temperature": 1.0, "topP": 0.95}

    @pytest.mark.asyncio
    async def test_token_budget_override(self, config):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        client = GeminiClient(config, transport.client())

        await client.generate("fix this", max_output_tokens=2048)

        body = json.loads(transport.requests[0].content)
        assert body["generationConfig"]["maxOutputTokens"] == 2048

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_request(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        client = GeminiClient(SentinelConfig(), transport.client())

        with pytest.raises(ConfigurationError) as exc_info:
            await client.generate("audit this")

        assert transport.requests == []
        assert exc_info.value.status_code == 500
        assert exc_info.value.to_dict() == {"error": "Server configuration error"}

    @pytest.mark.asyncio
    async def test_upstream_error_carries_status(self, config):
        transport = RecordingTransport(
            lambda request: httpx.Response(429, json={"error": {"message": "Quota exceeded"}})
        )
        client = GeminiClient(config, transport.client())

        with pytest.raises(UpstreamError) as exc_info:
            await client.generate("audit this")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "Gemini API failed: Too Many Requests"
        assert "Quota exceeded" in exc_info.value.body
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_network_failure_is_generic_error(self, config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GeminiClient(config, RecordingTransport(handler).client())

        with pytest.raises(SentinelError) as exc_info:
            await client.generate("audit this")

        assert not isinstance(exc_info.value, UpstreamError)
        assert exc_info.value.status_code == 500
        assert "Network request failed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_list_models_filters_gemini(self, config):
        models = {"models": [
            {"name": "models/gemini-2.5-flash"},
            {"name": "models/embedding-001"},
            {"name": "models/gemini-2.5-pro"},
        ]}
        transport = RecordingTransport(lambda request: httpx.Response(200, json=models))
        client = GeminiClient(config, transport.client())

        assert await client.list_models() == ["gemini-2.5-flash", "gemini-2.5-pro"]
        assert transport.requests[0].method == "GET"


class TestProxyService:
    """Test cases for the in-process proxy."""

    @pytest.mark.asyncio
    async def test_analyze_sends_built_prompt(self, config):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))

        async with ProxyService(config, http_client=transport.client()) as proxy:
            envelope = await proxy.analyze("module demo::m {}")

        assert envelope == ENVELOPE
        prompt = json.loads(transport.requests[0].content)["contents"][0]["parts"][0]["text"]
        assert "module demo::m {}" in prompt
        assert "Sui Move security auditor" in prompt

    @pytest.mark.asyncio
    async def test_analyze_with_examples(self, config):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        proxy = ProxyService(config.with_overrides(prompt_examples=True), http_client=transport.client())

        await proxy.analyze("module demo::m {}")

        prompt = json.loads(transport.requests[0].content)["contents"][0]["parts"][0]["text"]
        assert KNOWLEDGE_BASE[0].good_code.strip() in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, "", "   \n", 42])
    async def test_analyze_rejects_empty_code(self, config, code):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        proxy = ProxyService(config, http_client=transport.client())

        with pytest.raises(ValidationError) as exc_info:
            await proxy.analyze(code)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Contract code is required"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_fix_uses_smaller_budget(self, config):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))
        proxy = ProxyService(config, http_client=transport.client())

        await proxy.fix({"severity": "High", "type": "Capability Leak", "code_snippet": "share(cap);"})

        body = json.loads(transport.requests[0].content)
        assert body["generationConfig"]["maxOutputTokens"] == 2048
        assert "share(cap);" in body["contents"][0]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_fix_requires_snippet(self, config):
        proxy = ProxyService(config, http_client=RecordingTransport(lambda r: httpx.Response(200)).client())

        with pytest.raises(ValidationError):
            await proxy.fix({"severity": "High"})

    @pytest.mark.asyncio
    async def test_sui_query_requires_query(self, config):
        proxy = ProxyService(config, http_client=RecordingTransport(lambda r: httpx.Response(200)).client())

        with pytest.raises(ValidationError) as exc_info:
            await proxy.sui_query("")
        assert exc_info.value.message == "Query is required"


class TestRemoteProxy:
    """Test cases for the client side of a running proxy server."""

    @pytest.mark.asyncio
    async def test_analyze_posts_code(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=ENVELOPE))

        async with RemoteProxy("http://proxy.test/", http_client=transport.client()) as proxy:
            envelope = await proxy.analyze("module demo::m {}")

        assert envelope == ENVELOPE
        request = transport.requests[0]
        assert str(request.url) == "http://proxy.test/api/analyze"
        assert json.loads(request.content) == {"code": "module demo::m {}"}
        assert API_KEY_HEADER not in request.headers

    @pytest.mark.asyncio
    async def test_server_error_is_propagated(self):
        transport = RecordingTransport(
            lambda request: httpx.Response(500, json={"error": "Server configuration error"})
        )
        proxy = RemoteProxy("http://proxy.test", http_client=transport.client())

        with pytest.raises(UpstreamError) as exc_info:
            await proxy.analyze("module demo::m {}")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Server configuration error"

    @pytest.mark.asyncio
    async def test_sui_query_path(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"data": {}}))
        proxy = RemoteProxy("http://proxy.test", http_client=transport.client())

        assert await proxy.sui_query("{ chainIdentifier }", {"a": 1}) == {"data": {}}
        assert str(transport.requests[0].url) == "http://proxy.test/api/sui"
        assert json.loads(transport.requests[0].content) == {"query": "{ chainIdentifier }", "variables": {"a": 1}}
