"""File reader block: reads text, JSON or CSV from a URL, a local path or the input."""

import json
from pathlib import Path
from typing import Any

import httpx

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import parse_csv, to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


async def _fetch(url: str, context: BlockContext) -> str:
    async with context.http_client() as client:
        response = await client.get(url)
        response.raise_for_status()
        if "application/json" in response.headers.get("content-type", ""):
            data = response.json()
            return data if isinstance(data, str) else json.dumps(data)
        return response.text


@register_block()
class FileReaderBlock(BlockDefinition):
    """
    Read and parse a file.

    ``source_type`` is ``url`` (config ``url``), ``path`` (config ``path``,
    read as ``encoding``) or ``input`` (the input itself; a string that looks
    like a URL is fetched). ``file_format`` is ``text``, ``json`` or ``csv``.
    """

    block_type = "fileReader"
    label = "File Reader"
    description = "Read and parse files from URL, disk or input"
    default_config = {
        "source_type": "url",
        "url": "",
        "path": "",
        "file_format": "text",
        "encoding": "utf-8",
        "csv_delimiter": ",",
        "parse_json": True,
    }

    async def _read(self, config: dict[str, Any], input: Any, context: BlockContext) -> str:
        source_type = config.get("source_type", "url")
        if source_type == "url" and config.get("url"):
            return await _fetch(config["url"], context)
        if source_type == "path" and config.get("path"):
            return Path(config["path"]).expanduser().read_text(encoding=config.get("encoding", "utf-8"))
        if source_type == "input" and input:
            if isinstance(input, str):
                return await _fetch(input, context) if _is_url(input) else input
            return to_text(input)
        raise BlockError("File reading failed: File source not specified. Provide URL, path or input.")

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        file_format = config.get("file_format", "text")

        try:
            content = await self._read(config, input, context)
            if file_format == "json":
                return json.loads(content) if config.get("parse_json", True) else content
            if file_format == "csv":
                return parse_csv(content, delimiter=config.get("csv_delimiter") or ",")
            return content
        except BlockError:
            raise
        except (httpx.HTTPError, OSError, ValueError) as e:
            raise BlockError(f"File reading failed: {e}") from e
