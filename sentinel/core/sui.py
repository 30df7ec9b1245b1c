"""
Sui chain-data access for Sentinel
Fetches on-chain Move package disassembly as an alternative analysis input
"""

import logging
from typing import Any, Dict, Optional

from .config import SentinelConfig
from .errors import SentinelError, UpstreamError, ValidationError
from .http_client import HTTPClient

PACKAGE_QUERY = """
query GetPackage($id: SuiAddress!) {
    object(address: $id) {
        asMovePackage {
            address
            modules {
                nodes {
                    name
                    disassembly
                }
            }
        }
    }
}
"""

logger = logging.getLogger(__name__)


class SuiGraphQLClient:
    """Posts GraphQL queries to the Sui RPC endpoint."""

    def __init__(self, config: SentinelConfig, http_client: Optional[HTTPClient] = None):
        self.endpoint = config.sui_graphql_endpoint
        self.http = http_client or HTTPClient(timeout=config.timeout, user_agent=config.user_agent)

    async def close(self) -> None:
        await self.http.close()

    async def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one GraphQL query and return the decoded JSON body."""
        if not query:
            raise ValidationError("Query is required")

        response = await self.http.post_json(self.endpoint, {"query": query, "variables": variables})
        if not response.is_success:
            logger.error(f"Sui API Error: {response.status_code} {response.text[:300]}")
            raise UpstreamError(response.status_code, f"Sui API Error: {response.reason or response.error_message}")

        try:
            return response.json()
        except ValueError as e:
            raise SentinelError("Sui API returned a non-JSON response") from e


def normalize_package_id(package_id: str) -> str:
    package_id = (package_id or "").strip()
    if not package_id:
        raise ValidationError("Package ID is required")
    return package_id if package_id.startswith("0x") else f"0x{package_id}"


def format_package_code(move_package: Dict[str, Any]) -> str:
    """Concatenate every module's disassembly into one analyzable source text."""
    complete_code = f"// Decompiled Move Package: {move_package.get('address', '')}\n\n"
    for module in (move_package.get("modules") or {}).get("nodes") or []:
        complete_code += f"// Module: {module.get('name', '')}\n"
        complete_code += module.get("disassembly") or ""
        complete_code += "\n\n"
    return complete_code


async def fetch_package_code(backend, package_id: str) -> str:
    """Fetch a published package and return its combined disassembly.

    ``backend`` is anything with an async ``sui_query(query, variables)``:
    the in-process ProxyService or a RemoteProxy talking to ``/api/sui``.
    """
    formatted_id = normalize_package_id(package_id)
    logger.info(f"Fetching Move package {formatted_id}")

    data = await backend.sui_query(PACKAGE_QUERY, {"id": formatted_id})

    if data.get("errors"):
        messages = ", ".join(
            str(error.get("message", error)) if isinstance(error, dict) else str(error)
            for error in data["errors"]
        )
        raise SentinelError(f"GraphQL Errors: {messages}")

    move_package = (((data.get("data") or {}).get("object") or {}).get("asMovePackage"))
    if not move_package:
        raise SentinelError("Package not found or identifier is not a Move Package", status_code=404)

    return format_package_code(move_package)
