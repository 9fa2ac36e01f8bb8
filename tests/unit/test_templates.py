"""Tests for the template catalog and placeholder substitution."""

from __future__ import annotations

import re

import pytest

from tgnotify.errors import TemplateNotFoundError
from tgnotify.models import ParseMode
from tgnotify.templates.catalog import (
    TEMPLATES,
    TemplateName,
    available_languages,
    resolve_template,
    template_names,
)
from tgnotify.templates.renderer import format_value, render_message, substitute

SUCCESS_VARS = {
    "repository": "acme/app",
    "refName": "main",
    "sha": "abc123",
    "actor": "alice",
    "workflow": "CI",
    "customMessage": "All good",
}


class TestSubstitute:
    def test_replaces_known_keys(self) -> None:
        assert substitute("{{a}}-{{b}}", {"a": "x", "b": "y"}) == "x-y"

    def test_unknown_placeholder_untouched(self) -> None:
        assert substitute("Build {{status}}", {}) == "Build {{status}}"

    def test_falsy_values_are_substituted(self) -> None:
        assert substitute("{{n}} {{flag}} [{{empty}}]", {"n": 0, "flag": False, "empty": ""}) == (
            "0 false []"
        )

    def test_repeated_placeholder_replaced_everywhere(self) -> None:
        assert substitute("{{x}} and {{x}}", {"x": "1"}) == "1 and 1"

    def test_substituted_values_are_not_rescanned(self) -> None:
        assert substitute("{{a}}", {"a": "{{b}}", "b": "nope"}) == "{{b}}"

    def test_only_word_identifiers_match(self) -> None:
        assert substitute("{{a-b}} {{ a }}", {"a-b": "x", "a": "y"}) == "{{a-b}} {{ a }}"

    def test_rendering_is_deterministic(self) -> None:
        body = "{{a}} {{unknown}}"
        assert substitute(body, {"a": 1}) == substitute(body, {"a": 1})

    def test_format_value(self) -> None:
        assert format_value(True) == "true"
        assert format_value(1.5) == "1.5"


class TestCatalog:
    def test_every_template_has_english_body(self) -> None:
        for name in TemplateName:
            assert "en" in TEMPLATES[name]

    def test_template_names(self) -> None:
        assert template_names() == [
            "success", "error", "warning", "info", "deploy", "test", "release", "pull_request",
        ]

    def test_available_languages(self) -> None:
        assert available_languages(TemplateName.SUCCESS) == ["en", "ru", "zh"]

    def test_unknown_template_raises(self) -> None:
        with pytest.raises(TemplateNotFoundError, match="Template not found: bogus"):
            resolve_template("bogus")

    def test_missing_language_falls_back_to_english(self) -> None:
        assert resolve_template("success", "de") == resolve_template("success", "en")

    def test_lookup_is_case_insensitive(self) -> None:
        assert resolve_template("SUCCESS") == resolve_template("success")

    def test_html_variant_keeps_tags(self) -> None:
        assert "<b>Success</b>" in resolve_template("success", "en", ParseMode.HTML)

    def test_markdown_variant_uses_markdown_emphasis(self) -> None:
        body = resolve_template("success", "en", ParseMode.MARKDOWN)
        assert "*Success*" in body
        assert "`{{sha}}`" in body
        assert "<b>" not in body

    @pytest.mark.parametrize("mode", [ParseMode.MARKDOWN_V2, ParseMode.NONE])
    def test_plain_variant_has_no_markup(self, mode: ParseMode) -> None:
        body = resolve_template("success", "en", mode)
        assert "<" not in body
        assert "*" not in body
        assert "Success" in body


class TestRenderMessage:
    def test_success_template(self) -> None:
        text = render_message(SUCCESS_VARS, template="success", language="en")
        for value in ("acme/app", "main", "abc123", "alice", "CI", "All good"):
            assert value in text
        assert "✅" in text
        assert "Success" in text
        remaining = set(re.findall(r"\{\{(\w+)\}\}", text))
        assert remaining.isdisjoint(SUCCESS_VARS)

    def test_russian_success_template(self) -> None:
        text = render_message(SUCCESS_VARS, template="success", language="ru")
        assert "Успех" in text
        assert "Репозиторий" in text

    def test_error_template(self) -> None:
        text = render_message({"jobStatus": "failure"}, template="error")
        assert "❌" in text
        assert "Error" in text
        assert "failure" in text

    def test_deploy_template(self) -> None:
        text = render_message(
            {"deployStatus": "success", "customMessage": "Shipped"}, template="deploy",
        )
        assert "success" in text
        assert "Shipped" in text

    def test_raw_message_without_template(self) -> None:
        assert render_message({}, message="Build {{status}}") == "Build {{status}}"

    def test_raw_message_substitution(self) -> None:
        assert render_message({"actor": "alice"}, message="by {{actor}}") == "by alice"

    def test_unknown_template_raises(self) -> None:
        with pytest.raises(TemplateNotFoundError):
            render_message({}, message="x", template="bogus")

    def test_custom_message_is_not_expanded_inside_template(self) -> None:
        text = render_message(
            {"customMessage": "see {{actor}}", "actor": "alice"}, template="info",
        )
        assert "see {{actor}}" in text
