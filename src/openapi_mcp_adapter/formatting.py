"""Render tool outcomes as MCP text content."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .models import Envelope, Failure, Outcome, Success


SUCCESS_MARKER = "✅ "
FAILURE_MARKER = "❌ "


def format_response(type: str = "success", message: str = "", data: Any = None) -> Envelope:
    content: List[Dict[str, str]] = []

    if type == "error":
        content.append(_text(FAILURE_MARKER + message))
        return {"content": content}

    if message:
        content.append(_text(SUCCESS_MARKER + message))
    if data is not None:
        content.append(_text(format_data(data)))
    return {"content": content}


def format_outcome(outcome: Outcome) -> Envelope:
    if isinstance(outcome, Failure):
        return format_response(type="error", message=outcome.message)
    if isinstance(outcome, Success):
        return format_response(message=outcome.message, data=outcome.data)
    raise TypeError(f"Unsupported outcome: {outcome!r}")


def format_data(data: Any) -> str:
    if isinstance(data, (list, tuple)):
        lines = [f"{len(data)} items:"]
        for index, item in enumerate(data, start=1):
            if isinstance(item, (dict, list, tuple)):
                lines.append(f"{index}. {_to_json(item)}")
            else:
                lines.append(f"{index}. {_stringify(item)}")
        return "\n".join(lines)
    if isinstance(data, dict):
        return _to_json(data)
    return _stringify(data)


def describe_error(error: BaseException) -> str:
    message = str(error)
    if message:
        return message
    return json.dumps(
        {"error": type(error).__name__, "args": list(error.args)}, default=str
    )


def _text(text: str) -> Dict[str, str]:
    return {"type": "text", "text": text}


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _stringify(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    # 2.0 -> "2"; from 1e21 up the exponent form is kept.
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)
