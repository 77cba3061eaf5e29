"""Conversions applied to block inputs and outputs.

Values passed between blocks are JSON-like (str, numbers, bool, None, lists,
dicts). Blocks that need text or a nested field convert explicitly with these
helpers rather than guessing at the shape.
"""

import csv
import json
import re
from typing import Any

_INDEXED_KEY = re.compile(r"^(\w+)\[(\d+)\]$")
_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


def to_text(value: Any, indent: int | None = None) -> str:
    """Strings pass through; everything else is rendered as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def format_scalar(value: Any) -> str:
    """Render a value the way it reads inline in text (true/false/null like JSON)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, (dict, list)):
        return to_text(value)
    return str(value)


def get_path(obj: Any, path: str) -> Any:
    """
    Look up a dotted path such as ``data.results[0].text``.

    Returns None when any segment is missing.
    """
    current = obj
    for part in path.split("."):
        if current is None:
            return None
        match = _INDEXED_KEY.match(part)
        if match:
            key, index = match.group(1), int(match.group(2))
            container = current.get(key) if isinstance(current, dict) else None
            if not isinstance(container, list) or index >= len(container):
                return None
            current = container[index]
        elif isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current


def substitute(template: str, values: Any) -> str:
    """Replace ``{path}`` placeholders from ``values``; unknown ones are left as-is."""
    if not values:
        return template

    def replace(match: re.Match) -> str:
        value = get_path(values, match.group(1).strip())
        return match.group(0) if value is None else format_scalar(value)

    return _PLACEHOLDER.sub(replace, template)


def substitute_in_object(obj: Any, values: Any) -> Any:
    """Apply ``substitute`` to every string inside a nested structure."""
    if isinstance(obj, str):
        return substitute(obj, values)
    if isinstance(obj, list):
        return [substitute_in_object(item, values) for item in obj]
    if isinstance(obj, dict):
        return {key: substitute_in_object(value, values) for key, value in obj.items()}
    return obj


def parse_csv(text: str, delimiter: str = ",", lowercase_headers: bool = False) -> list[dict]:
    """
    Parse delimited text into a list of row dicts keyed by header.

    Quoted fields are unwrapped; empty or missing cells become None.
    """
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    reader = csv.reader(lines, delimiter=delimiter, skipinitialspace=True)
    headers = [h.strip() for h in next(reader)]
    if lowercase_headers:
        headers = [h.lower() for h in headers]

    rows = []
    for row in reader:
        cells = [c.strip() for c in row]
        rows.append(
            {
                header: (cells[i] if i < len(cells) and cells[i] else None)
                for i, header in enumerate(headers)
            }
        )
    return rows
