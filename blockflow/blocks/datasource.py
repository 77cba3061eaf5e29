"""Data source block: loads data from mock samples, JSON/API endpoints or CSV."""

from datetime import UTC, datetime
from typing import Any

import httpx

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import parse_csv
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec


def mock_data() -> dict[str, Any]:
    return {
        "status": "success",
        "data": [
            {"id": 1, "name": "Sample Item 1", "value": 100},
            {"id": 2, "name": "Sample Item 2", "value": 200},
            {"id": 3, "name": "Sample Item 3", "value": 300},
        ],
        "timestamp": datetime.now(UTC).isoformat(),
    }


_SOURCE_LABELS = {"json": "JSON", "api": "API", "csv": "CSV"}


@register_block()
class DataSourceBlock(BlockDefinition):
    block_type = "datasource"
    label = "Data Source"
    description = "Load data from external sources"
    default_config = {"source_type": "mock", "url": "", "format": "json"}

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        source_type = config.get("source_type", "mock")
        url = config.get("url", "")

        if source_type == "mock":
            return mock_data()
        if source_type not in _SOURCE_LABELS:
            raise BlockError(f"Data source failed: Unknown source type: {source_type}")
        if not url:
            raise BlockError(
                f"Data source failed: URL is required for {_SOURCE_LABELS[source_type]} data source"
            )

        try:
            async with context.http_client() as client:
                response = await client.get(url)
                response.raise_for_status()
                if source_type == "csv":
                    return parse_csv(response.text, lowercase_headers=True)
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BlockError(f"Data source failed: {e}") from e
