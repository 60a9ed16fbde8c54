"""Rendering of tokens, provider descriptions and token paths for error messages."""

from __future__ import annotations

import inspect
import json
from collections.abc import Mapping
from typing import Any


CONTEXT_LABEL = "InjectorError"


def stringify(obj: Any) -> str:
    """Human readable name of a token or value.

    Classes and functions render as their qualified name, strings as themselves
    and everything else through ``repr()``.
    """
    if isinstance(obj, str):
        return obj
    if inspect.isclass(obj) or inspect.isroutine(obj):
        return obj.__qualname__
    return repr(obj)


def format_context(obj: Any) -> str:
    if isinstance(obj, (list, tuple)):
        return " -> ".join(stringify(item) for item in obj)

    if isinstance(obj, Mapping):
        parts = [
            f"{key}:{json.dumps(value) if isinstance(value, str) else stringify(value)}" for key, value in obj.items()
        ]
        return "{" + ", ".join(parts) + "}"

    return stringify(obj)


def error_message(text: str, obj: Any) -> str:
    """Single error line: ``InjectorError[<context>]: <text>``.

    Continuation lines of ``text`` are indented so nested reasons stay readable.
    """
    reason = text.replace("\n", "\n  ")
    return f"{CONTEXT_LABEL}[{format_context(obj)}]: {reason}"
