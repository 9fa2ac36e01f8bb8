"""Inline keyboard parsing for ``reply_markup``."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from tgnotify.models import VariableValue
from tgnotify.reporting import WarningSink
from tgnotify.templates.renderer import substitute

logger = logging.getLogger(__name__)

Button = dict[str, Any]


def parse_inline_keyboard(
    raw: str | None,
    variables: Mapping[str, VariableValue],
    sink: WarningSink = logger,
) -> dict[str, list[list[Button]]] | None:
    """Build ``{"inline_keyboard": rows}`` from INLINE_KEYBOARD JSON.

    A flat list of buttons becomes a single row. String fields of every
    button are rendered against ``variables``. Anything malformed yields
    ``None`` and a warning.
    """
    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        sink.warning("⚠️ Failed to parse JSON in inline_keyboard: %s", exc)
        return None
    if not isinstance(data, list) or not data:
        sink.warning("⚠️ inline_keyboard must be a non-empty JSON array")
        return None

    rows = data if all(isinstance(item, list) for item in data) else [data]
    keyboard: list[list[Button]] = []
    for row in rows:
        buttons = [b for b in row if isinstance(b, dict)]
        if len(buttons) != len(row):
            sink.warning("⚠️ Ignoring inline_keyboard entries that are not objects")
        if buttons:
            keyboard.append([_render_button(b, variables) for b in buttons])
    if not keyboard:
        return None
    return {"inline_keyboard": keyboard}


def _render_button(button: Button, variables: Mapping[str, VariableValue]) -> Button:
    return {
        key: substitute(value, variables) if isinstance(value, str) else value
        for key, value in button.items()
    }
