"""Tests for environment configuration."""

from __future__ import annotations

import pytest

from tgnotify.config import NotifyConfig, parse_bool
from tgnotify.errors import MissingInputError
from tgnotify.models import ParseMode
from tests.conftest import RecordingSink, make_config

BASE_ENV = {"TELEGRAM_TOKEN": "t", "CHAT_ID": "c", "MESSAGE": "m"}


class TestFromEnv:
    def test_defaults(self, sink: RecordingSink) -> None:
        config = NotifyConfig.from_env(BASE_ENV, sink)
        assert config.parse_mode is ParseMode.HTML
        assert config.language == "en"
        assert config.file_type == "document"
        assert config.retry.max_retries == 3
        assert config.retry.base_delay == 1.0
        assert config.retry.max_rate_limit_retries == 5
        assert config.retry.rate_limit_delay == 30.0
        assert config.api_url == "https://api.telegram.org"
        assert config.send_on_failure is False
        assert config.force_as_photo is False
        assert sink.messages == []

    def test_reads_all_inputs(self) -> None:
        env = {
            **BASE_ENV,
            "TEMPLATE": "success",
            "LANGUAGE": "RU",
            "TEMPLATE_VARS": '{"a": 1}',
            "PARSE_MODE": "markdown",
            "MESSAGE_THREAD_ID": "4",
            "MESSAGE_ID": "100",
            "REPLY_TO_MESSAGE_ID": "7",
            "DISABLE_WEB_PAGE_PREVIEW": "true",
            "DISABLE_NOTIFICATION": "1",
            "PROTECT_CONTENT": "yes",
            "INLINE_KEYBOARD": "[]",
            "FILE_PATH": "/tmp/x",
            "FILE_TYPE": "photo",
            "CAPTION": "cap",
            "FORCE_AS_PHOTO": "true",
            "MAX_RETRIES": "1",
            "RETRY_DELAY": "0.5",
            "SEND_ON_FAILURE": "on",
            "JOB_STATUS": "Failure",
            "GITHUB_EVENT_PATH": "/tmp/event.json",
            "GITHUB_EVENT_NAME": "push",
            "TELEGRAM_API_URL": "http://localhost:8081",
        }
        config = NotifyConfig.from_env(env)
        assert config.template == "success"
        assert config.language == "ru"
        assert config.parse_mode is ParseMode.MARKDOWN
        assert config.message_thread_id == 4
        assert config.message_id == 100
        assert config.reply_to_message_id == 7
        assert config.disable_web_page_preview is True
        assert config.disable_notification is True
        assert config.protect_content is True
        assert config.file_path == "/tmp/x"
        assert config.file_type == "photo"
        assert config.force_as_photo is True
        assert config.retry.max_retries == 1
        assert config.retry.base_delay == 0.5
        assert config.send_on_failure is True
        assert config.job_status == "failure"
        assert config.event_name == "push"
        assert config.api_url == "http://localhost:8081"

    def test_token_and_api_url_are_stripped(self) -> None:
        env = {
            **BASE_ENV,
            "TELEGRAM_TOKEN": "123456:TOKEN\n",
            "CHAT_ID": " -100123 ",
            "TELEGRAM_API_URL": "http://localhost:8081\n",
        }
        config = NotifyConfig.from_env(env)
        assert config.telegram_token == "123456:TOKEN"
        assert config.chat_id == "-100123"
        assert config.api_url == "http://localhost:8081"

    def test_empty_parse_mode_means_none(self) -> None:
        assert NotifyConfig.from_env({**BASE_ENV, "PARSE_MODE": ""}).parse_mode is ParseMode.NONE

    def test_invalid_numbers_fall_back_with_warning(self, sink: RecordingSink) -> None:
        env = {**BASE_ENV, "MAX_RETRIES": "lots", "RATE_LIMIT_DELAY": "-5"}
        config = NotifyConfig.from_env(env, sink)
        assert config.retry.max_retries == 3
        assert config.retry.rate_limit_delay == 30.0
        assert sink.contains("Invalid MAX_RETRIES")
        assert sink.contains("Negative RATE_LIMIT_DELAY")

    def test_invalid_message_id_is_ignored(self, sink: RecordingSink) -> None:
        config = NotifyConfig.from_env({**BASE_ENV, "MESSAGE_ID": "abc"}, sink)
        assert config.message_id is None
        assert sink.contains("Invalid MESSAGE_ID")


class TestRequireInputs:
    def test_valid(self) -> None:
        make_config().require_inputs()

    def test_missing_token(self) -> None:
        with pytest.raises(MissingInputError, match="TELEGRAM_TOKEN is required"):
            make_config(telegram_token="").require_inputs()

    def test_missing_chat_id(self) -> None:
        with pytest.raises(MissingInputError, match="CHAT_ID is required"):
            make_config(chat_id="").require_inputs()

    def test_missing_body_source(self) -> None:
        with pytest.raises(MissingInputError, match="Either MESSAGE, FILE_PATH, or TEMPLATE"):
            make_config(message="").require_inputs()

    def test_template_alone_is_enough(self) -> None:
        make_config(message="", template="success").require_inputs()

    def test_file_alone_is_enough(self) -> None:
        make_config(message="", file_path="/tmp/report.txt").require_inputs()

    def test_base64_requires_file_name(self) -> None:
        with pytest.raises(MissingInputError, match="FILE_NAME is required when using FILE_BASE64"):
            make_config(file_base64="aGVsbG8=").require_inputs()


@pytest.mark.parametrize("value,expected", [
    ("true", True), ("TRUE", True), ("1", True), ("yes", True), ("on", True),
    ("false", False), ("0", False), ("", False), (None, False), ("nope", False),
])
def test_parse_bool(value: str | None, expected: bool) -> None:
    assert parse_bool(value) is expected


class TestLocalisedInputErrors:
    def test_missing_token_in_russian(self) -> None:
        with pytest.raises(MissingInputError, match="Требуется TELEGRAM_TOKEN"):
            make_config(telegram_token="", language="ru").require_inputs()

    def test_missing_chat_id_in_chinese(self) -> None:
        with pytest.raises(MissingInputError, match="需要 CHAT_ID"):
            make_config(chat_id="", language="zh").require_inputs()

    def test_unknown_language_uses_english(self) -> None:
        with pytest.raises(MissingInputError, match="Either MESSAGE, FILE_PATH, or TEMPLATE"):
            make_config(message="", language="de").require_inputs()
