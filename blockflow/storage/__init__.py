"""Flow persistence: JSON documents on disk."""

from blockflow.storage.serializer import (
    FlowDocument,
    load_flow_from_json,
    read_flow_file,
    save_flow_to_json,
    write_flow_file,
)

__all__ = [
    "FlowDocument",
    "save_flow_to_json",
    "load_flow_from_json",
    "read_flow_file",
    "write_flow_file",
]
