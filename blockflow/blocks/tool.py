"""Tool block: calls an external HTTP API."""

import json
import logging
from typing import Any

import httpx

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import get_path, substitute, substitute_in_object, to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH"}


def _build_headers(config: dict[str, Any]) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    headers.update({str(k): str(v) for k, v in (config.get("headers") or {}).items()})

    auth_type = config.get("auth_type", "none")
    auth_value = config.get("auth_value", "")
    if auth_type == "bearer" and auth_value:
        headers["Authorization"] = f"Bearer {auth_value}"
    elif auth_type == "apiKey" and auth_value:
        headers["X-API-Key"] = auth_value
    return headers


def _build_body(body_template: Any, input: Any) -> str | None:
    if body_template and body_template != "{}":
        template = json.loads(body_template) if isinstance(body_template, str) else body_template
        return json.dumps(substitute_in_object(template, input))
    if input:
        return to_text(input)
    return None


@register_block()
class ToolBlock(BlockDefinition):
    """
    Call an external API with authentication and response mapping.

    Query parameter values and the body template may reference input fields
    with ``{path}`` placeholders. When the call fails and ``fallback_value``
    is set, the fallback is returned instead of raising.
    """

    block_type = "tool"
    label = "Tool"
    description = "Call an external API or tool with authentication & response mapping"
    default_config = {
        "url": "https://api.example.com/endpoint",
        "method": "POST",
        "query_params": {},
        "body_template": "{}",
        "headers": {"Content-Type": "application/json"},
        "auth_type": "none",
        "auth_value": "",
        "response_field_selector": "",
        "timeout": 30.0,
        "fallback_value": None,
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        url = config.get("url", "")
        if not url:
            raise BlockError("Tool URL is required")

        method = str(config.get("method", "GET")).upper()
        selector = config.get("response_field_selector", "")
        fallback = config.get("fallback_value")

        try:
            params = {
                key: substitute(str(value), input)
                for key, value in (config.get("query_params") or {}).items()
            }
            body = None
            if method in BODY_METHODS:
                body = _build_body(config.get("body_template", "{}"), input)
            timeout = config.get("timeout") or context.config.http_timeout

            async with context.http_client(timeout=timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params or None,
                    content=body,
                    headers=_build_headers(config),
                    timeout=timeout,
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            if fallback is not None:
                logger.warning(
                    f"Tool execution failed, using fallback: {e}", extra={"node_id": node.id}
                )
                return fallback
            raise BlockError(f"Tool execution failed: {e}") from e

        if selector:
            return get_path(data, selector)
        return data
