"""Text helpers."""

from __future__ import annotations

from typing import Any


def get_trimmed_text(text: str, trim_to: int) -> str:
    """Trim ``text`` to ``trim_to`` characters, appending an ellipsis when cut."""

    if text and len(text) > trim_to:
        return f"{text[:trim_to]}..."
    return text


def display_value(value: Any, trim_to: int | None = None) -> str:
    """Render a property value for a one-line summary.

    Empty values read as ``Not set``; ``False`` and ``0`` are real values.
    """

    if value is None or value == "" or value == {} or value == []:
        return "Not set"
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return get_trimmed_text(text, trim_to) if trim_to is not None else text
