"""Tests for the output sanitizer."""

from __future__ import annotations

import pytest

from tgnotify.models import ParseMode
from tgnotify.sanitizer.sanitizer import OutputSanitizer, sanitize


@pytest.fixture
def sanitizer() -> OutputSanitizer:
    return OutputSanitizer()


class TestHtmlCleaning:
    @pytest.mark.parametrize("text", [
        "Simple message without HTML",
        "Message with <b>bold</b> text",
        "<i>a</i> <em>b</em> <u>c</u> <ins>d</ins> <s>e</s> <strike>f</strike> <del>g</del>",
        '<a href="https://example.com">link</a> <code>x = 1</code> <pre>block</pre>',
        '<span class="tg-spoiler">secret</span> <tg-spoiler>hidden</tg-spoiler>',
        "<strong>STRONG</strong> and <B>upper</B>",
    ])
    def test_whitelisted_markup_is_unchanged(self, sanitizer: OutputSanitizer, text: str) -> None:
        assert sanitizer.clean_html(text) == text

    def test_script_tag_removed_text_kept(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.clean_html("before <script>alert(1)</script> after") == (
            "before alert(1) after"
        )

    def test_unsupported_tags_removed(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.clean_html("Message with <picture>invalid tag</picture>") == (
            "Message with invalid tag"
        )
        assert sanitizer.clean_html("<div>unsupported div</div> and <i>italic</i>") == (
            "unsupported div and <i>italic</i>"
        )

    def test_self_closing_and_attribute_tags_removed(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.clean_html('img <img src="test.jpg"/> and <code>code</code>') == (
            "img  and <code>code</code>"
        )
        assert sanitizer.clean_html("line<br/>break") == "linebreak"

    def test_malformed_tokens_removed(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.clean_html("a <!-- note --> b <> c") == "a  b  c"

    def test_tag_name_prefix_is_not_whitelisted(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.clean_html("<bold>x</bold> <iframe>y</iframe>") == "x y"

    def test_custom_whitelist(self) -> None:
        only_bold = OutputSanitizer(allowed_tags=["b"])
        assert only_bold.clean_html("<b>x</b> <i>y</i>") == "<b>x</b> y"


class TestMarkdownBalancing:
    def test_balanced_text_is_unchanged(self, sanitizer: OutputSanitizer) -> None:
        text = "*bold* and `code` and ```\nblock\n``` and **strong**"
        assert sanitizer.balance_markdown(text) == text

    def test_is_idempotent(self, sanitizer: OutputSanitizer) -> None:
        once = sanitizer.balance_markdown("*open and my_var ~x")
        assert sanitizer.balance_markdown(once) == once

    def test_closes_dangling_bold(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("**open") == "**open**"

    def test_closes_dangling_italic(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("**b** *open") == "**b** *open*"

    def test_closes_dangling_fence(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("```\ncode") == "```\ncode\n```"

    def test_closes_dangling_backtick(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("run `make") == "run `make`"

    def test_escapes_underscore_and_tilde(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("my_var ~x") == "my\\_var \\~x"

    def test_already_escaped_characters_untouched(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("my\\_var") == "my\\_var"

    def test_strips_zero_width_characters(self, sanitizer: OutputSanitizer) -> None:
        assert sanitizer.balance_markdown("a\u200bb\u200cc\u200dd\ufeffe\u2060f") == "abcdef"


class TestSanitizeDispatch:
    def test_html_mode(self) -> None:
        assert sanitize("<p>x</p>", ParseMode.HTML) == "x"

    def test_markdown_mode(self) -> None:
        assert sanitize("**x", ParseMode.MARKDOWN) == "**x**"

    @pytest.mark.parametrize("mode", [ParseMode.MARKDOWN_V2, ParseMode.NONE])
    def test_other_modes_pass_through(self, mode: ParseMode) -> None:
        text = "<p>**x_y"
        assert sanitize(text, mode) == text
