"""
Flow Serializer - Save and load flows as JSON.

A flow document is the whole state of a canvas: its nodes, its edges and a
little metadata. Two node shapes are accepted on load:

  {"id": "n1", "type": "prompt", "config": {...}, "label": "..."}
  {"id": "n1", "type": "prompt", "data": {"config": {...}, "label": "..."}}

The second is what a canvas editor writes. Config keys written in camelCase
(``includeInput``) are normalised to snake_case (``include_input``).
"""

import json
import logging
import os
import re
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from blockflow.errors import FlowFormatError
from blockflow.graph.edge import EdgeSpec, FlowGraph
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def now_ms() -> int:
    return int(time.time() * 1000)


def to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _normalize_node(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    node = dict(raw)
    data = node.get("data")
    if isinstance(data, dict):
        if "config" not in node and isinstance(data.get("config"), dict):
            node["config"] = data["config"]
        if node.get("label") is None and data.get("label"):
            node["label"] = data["label"]
    config = node.get("config")
    if isinstance(config, dict):
        node["config"] = {to_snake_case(key): value for key, value in config.items()}
    return node


class FlowDocument(BaseModel):
    """A saved flow: metadata plus the graph. Timestamps are epoch milliseconds."""

    id: str
    name: str = "Untitled Flow"
    nodes: list[NodeSpec] = Field(default_factory=list)
    edges: list[EdgeSpec] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    updated_at: int = Field(default_factory=now_ms, alias="updatedAt")

    model_config = {"populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _normalize_nodes(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("nodes"), list):
            data = {**data, "nodes": [_normalize_node(node) for node in data["nodes"]]}
        return data

    @classmethod
    def new(
        cls,
        name: str = "Untitled Flow",
        nodes: list[NodeSpec] | None = None,
        edges: list[EdgeSpec] | None = None,
    ) -> "FlowDocument":
        return cls(id=f"flow-{uuid.uuid4().hex[:12]}", name=name, nodes=nodes or [], edges=edges or [])

    def to_graph(self) -> FlowGraph:
        """The graph model; raises ValueError on duplicate node or edge ids."""
        return FlowGraph(nodes=list(self.nodes), edges=list(self.edges))

    def touch(self) -> None:
        self.updated_at = now_ms()


def save_flow_to_json(flow: FlowDocument) -> str:
    return flow.model_dump_json(indent=2, by_alias=True)


def load_flow_from_json(text: str) -> FlowDocument:
    """
    Parse a flow document.

    Raises:
        FlowFormatError: The text is not JSON, lacks ``id`` / ``nodes`` /
            ``edges``, or does not match the document shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FlowFormatError(f"Failed to parse flow JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("id") or "nodes" not in data or "edges" not in data:
        raise FlowFormatError("Failed to parse flow JSON: Invalid flow format")

    try:
        return FlowDocument.model_validate(data)
    except ValidationError as e:
        raise FlowFormatError(f"Failed to parse flow JSON: {e}") from e


def read_flow_file(path: str | Path) -> FlowDocument:
    path = Path(path)
    flow = load_flow_from_json(path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded flow {flow.id} from {path}")
    return flow


def write_flow_file(flow: FlowDocument, path: str | Path) -> Path:
    """Write a flow document; temp file + rename so a crash never leaves half a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(save_flow_to_json(flow))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote flow {flow.id} to {path}")
    return path
