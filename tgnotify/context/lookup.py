"""Non-throwing nested lookups into untyped event payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_MISSING = object()


def dig(data: Any, *path: str | int) -> Any:
    """Follow ``path`` through dicts and lists; ``None`` when any step is absent."""
    current = data
    for key in path:
        if isinstance(current, Mapping) and not isinstance(key, int):
            current = current.get(key, _MISSING)
        elif isinstance(current, list) and isinstance(key, int):
            current = current[key] if -len(current) <= key < len(current) else _MISSING
        else:
            return None
        if current is _MISSING:
            return None
    return current


def join_names(items: Any, key: str) -> str | None:
    """Comma-join ``item[key]`` over a list of objects (labels, assignees)."""
    if not isinstance(items, list):
        return None
    names = [str(item[key]) for item in items if isinstance(item, Mapping) and key in item]
    return ", ".join(names)
