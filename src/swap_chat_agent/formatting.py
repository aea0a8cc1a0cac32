"""
Render tool results as plain ``key: value`` text for the summarize prompt.
"""

import json
from typing import Any


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return "\n".join(f"{key}: {_format_value(item)}" for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), separators=(",", ":"), default=str)
    return str(value)


def format_tool_response(response: Any) -> str:
    """Flatten a tool result into ``key: value`` lines.

    Nested mappings recurse and sequences are rendered as compact JSON.
    Other top-level values use the same JSON spelling as nested ones, so
    ``None`` becomes ``null``.
    """
    data = response
    if isinstance(response, str):
        try:
            data = json.loads(response)
        except ValueError:
            return response

    if not isinstance(data, dict):
        return response if isinstance(response, str) else _format_value(data)

    return "\n".join(f"{key}: {_format_value(value)}" for key, value in data.items())
