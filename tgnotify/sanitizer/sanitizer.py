"""Output sanitizer: makes rendered text acceptable to Telegram's parsers.

HTML mode keeps only the tags Telegram understands. Markdown mode balances
emphasis and code markers so an odd marker does not make the whole message
bounce. Both are textual heuristics, not parsers.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from tgnotify.models import ParseMode

ALLOWED_HTML_TAGS: tuple[str, ...] = (
    "b", "strong",
    "i", "em",
    "u", "ins",
    "s", "strike", "del",
    "span", "tg-spoiler",
    "a",
    "code", "pre",
)

# <name ...>, </name>, <name/>
_TAG_RE = re.compile(r"<\s*/?\s*([A-Za-z][\w-]*)(?:\s[^<>]*)?/?\s*>")
# anything left that looks like a tag
_TOKEN_RE = re.compile(r"<[^<>]*>")
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\u2060\ufeff]")
_MARKDOWN_ESCAPE_RE = re.compile(r"(?<!\\)([_~])")


class OutputSanitizer:
    """Format-aware cleanup of rendered messages and captions."""

    def __init__(self, allowed_tags: Iterable[str] = ALLOWED_HTML_TAGS) -> None:
        self.allowed_tags = frozenset(tag.lower() for tag in allowed_tags)
        names = "|".join(re.escape(tag) for tag in sorted(self.allowed_tags, key=len, reverse=True))
        self._allowed_re = re.compile(rf"</?(?:{names})(?:\s[^<>]*)?>", re.IGNORECASE)

    def sanitize(self, text: str, parse_mode: ParseMode) -> str:
        if parse_mode is ParseMode.HTML:
            return self.clean_html(text)
        if parse_mode is ParseMode.MARKDOWN:
            return self.balance_markdown(text)
        return text

    def clean_html(self, text: str) -> str:
        """Strip every tag outside the whitelist, keeping the text between them."""

        def _drop_unknown(match: re.Match[str]) -> str:
            if match.group(1).lower() in self.allowed_tags:
                return match.group(0)
            return ""

        def _drop_malformed(match: re.Match[str]) -> str:
            token = match.group(0)
            return token if self._allowed_re.fullmatch(token) else ""

        cleaned = _TAG_RE.sub(_drop_unknown, text)
        return _TOKEN_RE.sub(_drop_malformed, cleaned)

    def balance_markdown(self, text: str) -> str:
        """Close dangling ``**``, ``*``, fences and backticks; escape ``_`` and ``~``.

        Markers are only counted, never matched, so badly nested markup is
        not detected. Text that is already balanced and escaped comes back
        unchanged.
        """
        text = _ZERO_WIDTH_RE.sub("", text)

        bold = text.count("**")
        if bold % 2:
            text += "**"
            bold += 1
        if (text.count("*") - 2 * bold) % 2:
            text += "*"

        fences = text.count("```")
        if fences % 2:
            text += "\n```"
            fences += 1
        if (text.count("`") - 3 * fences) % 2:
            text += "`"

        return _MARKDOWN_ESCAPE_RE.sub(r"\\\1", text)


_default = OutputSanitizer()


def sanitize(text: str, parse_mode: ParseMode) -> str:
    return _default.sanitize(text, parse_mode)
