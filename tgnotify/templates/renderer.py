"""Template rendering: flat ``{{identifier}}`` substitution.

Only placeholders whose key is present in the variable map are replaced;
presence, not truthiness, decides (``0`` and ``False`` are substituted).
Unknown placeholders stay in the output byte for byte.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from tgnotify.models import ParseMode, VariableValue
from tgnotify.templates.catalog import resolve_template

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def format_value(value: VariableValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(body: str, variables: Mapping[str, VariableValue]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in variables:
            return format_value(variables[key])
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, body)


def render_message(
    variables: Mapping[str, VariableValue],
    message: str | None = None,
    template: str | None = None,
    language: str = "en",
    parse_mode: ParseMode = ParseMode.HTML,
) -> str:
    """Render a built-in template, or the raw message when no template is named.

    Raises TemplateNotFoundError for an unknown template name.
    """
    if template:
        body = resolve_template(template, language, parse_mode)
    else:
        body = message or ""
    return substitute(body, variables)
