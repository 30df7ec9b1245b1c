"""
Test suite for Sui package fetching
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from sentinel.core.config import SentinelConfig
from sentinel.core.errors import SentinelError, UpstreamError, ValidationError
from sentinel.core.http_client import HTTPClient
from sentinel.core.sui import (
    PACKAGE_QUERY,
    SuiGraphQLClient,
    fetch_package_code,
    format_package_code,
    normalize_package_id,
)


PACKAGE = {
    "address": "0x2",
    "modules": {"nodes": [
        {"name": "coin", "disassembly": "module 0x2.coin {}"},
        {"name": "balance", "disassembly": "module 0x2.balance {}"},
    ]},
}


@pytest.fixture
def backend():
    mock_backend = MagicMock()
    mock_backend.sui_query = AsyncMock(return_value={"data": {"object": {"asMovePackage": PACKAGE}}})
    return mock_backend


class TestPackageHelpers:
    """Test cases for package ID handling and formatting."""

    def test_normalize_package_id(self):
        assert normalize_package_id("0x2") == "0x2"
        assert normalize_package_id(" abc ") == "0xabc"

    def test_empty_package_id(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_package_id("  ")
        assert exc_info.value.message == "Package ID is required"

    def test_format_package_code(self):
        assert format_package_code(PACKAGE) == (
            "// Decompiled Move Package: 0x2\n\n"
            "// Module: coin\nmodule 0x2.coin {}\n\n"
            "// Module: balance\nmodule 0x2.balance {}\n\n"
        )

    def test_format_package_without_modules(self):
        assert format_package_code({"address": "0x9"}) == "// Decompiled Move Package: 0x9\n\n"


class TestFetchPackageCode:
    """Test cases for fetching package disassembly through a backend."""

    @pytest.mark.asyncio
    async def test_fetch_formats_modules(self, backend):
        code = await fetch_package_code(backend, "2")

        assert code.startswith("// Decompiled Move Package: 0x2")
        assert "// Module: balance" in code
        backend.sui_query.assert_awaited_once_with(PACKAGE_QUERY, {"id": "0x2"})

    @pytest.mark.asyncio
    async def test_graphql_errors(self, backend):
        backend.sui_query.return_value = {"errors": [{"message": "Invalid address"}, "rate limited"]}

        with pytest.raises(SentinelError) as exc_info:
            await fetch_package_code(backend, "0x2")
        assert exc_info.value.message == "GraphQL Errors: Invalid address, rate limited"

    @pytest.mark.asyncio
    async def test_not_a_package(self, backend):
        backend.sui_query.return_value = {"data": {"object": {"asMovePackage": None}}}

        with pytest.raises(SentinelError) as exc_info:
            await fetch_package_code(backend, "0x2")
        assert exc_info.value.status_code == 404


class TestSuiGraphQLClient:
    """Test cases for the GraphQL relay."""

    @pytest.fixture
    def config(self):
        return SentinelConfig(sui_graphql_endpoint="https://sui.test/graphql")

    @pytest.mark.asyncio
    async def test_query_posts_to_endpoint(self, config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"chainIdentifier": "35834a8a"}})

        client = SuiGraphQLClient(config, HTTPClient(transport=httpx.MockTransport(handler)))
        data = await client.query("{ chainIdentifier }")
        await client.close()

        assert data == {"data": {"chainIdentifier": "35834a8a"}}
        assert str(seen[0].url) == "https://sui.test/graphql"
        assert json.loads(seen[0].content) == {"query": "{ chainIdentifier }", "variables": None}

    @pytest.mark.asyncio
    async def test_upstream_failure(self, config):
        client = SuiGraphQLClient(
            config,
            HTTPClient(transport=httpx.MockTransport(lambda request: httpx.Response(503, text="down"))),
        )

        with pytest.raises(UpstreamError) as exc_info:
            await client.query("{ chainIdentifier }")
        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Sui API Error: Service Unavailable"

    @pytest.mark.asyncio
    async def test_empty_query(self, config):
        client = SuiGraphQLClient(config, HTTPClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))

        with pytest.raises(ValidationError):
            await client.query("")
