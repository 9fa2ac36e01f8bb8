"""Context aggregation: merges variable layers with fixed precedence.

Layers, lowest to highest precedence:

1. platform context (runner environment),
2. event context (derived from the event payload),
3. ``customMessage`` carrying the raw MESSAGE text,
4. user overrides from TEMPLATE_VARS.

A later layer's key always wins over an earlier layer's.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from tgnotify.models import VariableMap, VariableValue
from tgnotify.reporting import WarningSink
from tgnotify.templates.renderer import substitute

logger = logging.getLogger(__name__)

CUSTOM_MESSAGE_KEY = "customMessage"


def parse_overrides(raw: str | None, sink: WarningSink = logger) -> dict[str, VariableValue]:
    """Parse TEMPLATE_VARS; anything unusable degrades to ``{}`` with a warning."""
    if not raw or not raw.strip():
        return {}
    try:
        data: Any = json.loads(raw)
    except ValueError as exc:
        sink.warning("⚠️ Failed to parse JSON in template_vars: %s", exc)
        return {}
    if not isinstance(data, dict):
        sink.warning("⚠️ template_vars must be a JSON object, got %s", type(data).__name__)
        return {}

    overrides: dict[str, VariableValue] = {}
    for key, value in data.items():
        if value is None or isinstance(value, (dict, list)):
            sink.warning("⚠️ Ignoring non-scalar template variable %r", key)
            continue
        overrides[str(key)] = value
    return overrides


def aggregate_context(
    platform: Mapping[str, VariableValue],
    event: Mapping[str, VariableValue],
    message: str | None = None,
    overrides: Mapping[str, VariableValue] | None = None,
) -> VariableMap:
    """Merge the four layers into one flat variable map.

    String override values are rendered against the lower layers first, so
    ``{"url": "{{serverUrl}}/{{repository}}"}`` resolves.
    """
    context: VariableMap = {}
    context.update(platform)
    context.update(event)
    context[CUSTOM_MESSAGE_KEY] = message or ""

    base = dict(context)
    for key, value in (overrides or {}).items():
        context[key] = substitute(value, base) if isinstance(value, str) else value
    return context
