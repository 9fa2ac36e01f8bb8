"""Invocation configuration read from the action's environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from tgnotify.delivery.retry import RetryPolicy
from tgnotify.delivery.telegram import DEFAULT_API_URL
from tgnotify.errors import MissingInputError
from tgnotify.i18n import translate
from tgnotify.models import ParseMode
from tgnotify.reporting import WarningSink

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class NotifyConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    telegram_token: str = ""
    chat_id: str = ""
    message: str = ""
    template: str | None = None
    language: str = "en"
    template_vars: str | None = None
    parse_mode: ParseMode = ParseMode.HTML

    message_thread_id: int | None = None
    message_id: int | None = None
    reply_to_message_id: int | None = None
    disable_web_page_preview: bool = False
    disable_notification: bool = False
    protect_content: bool = False
    inline_keyboard: str | None = None

    file_path: str | None = None
    file_base64: str | None = None
    file_name: str | None = None
    file_type: str = "document"
    caption: str | None = None
    force_as_photo: bool = False

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    send_on_failure: bool = False
    send_on_success: bool = False
    job_status: str = ""

    event_path: str | None = None
    event_name: str | None = None
    api_url: str = DEFAULT_API_URL

    @property
    def has_file(self) -> bool:
        return bool(self.file_path or self.file_base64)

    def require_inputs(self) -> None:
        """Raise MissingInputError unless token, chat and a body source are set."""
        if not self.telegram_token:
            raise MissingInputError(translate("token_required", self.language))
        if not self.chat_id:
            raise MissingInputError(translate("chat_id_required", self.language))
        if not (self.message or self.template or self.has_file):
            raise MissingInputError(translate("message_required", self.language))
        if self.file_base64 and not self.file_path and not self.file_name:
            raise MissingInputError(translate("file_name_required", self.language))

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        sink: WarningSink = logger,
    ) -> NotifyConfig:
        env = os.environ if environ is None else environ

        def text(name: str) -> str | None:
            value = env.get(name)
            return value if value else None

        def number(name: str, default: float) -> float:
            raw = env.get(name)
            if raw is None or not raw.strip():
                return default
            try:
                value = float(raw)
            except ValueError:
                sink.warning("⚠️ Invalid %s value %r, using %s", name, raw, default)
                return default
            if value < 0:
                sink.warning("⚠️ Negative %s value %r, using %s", name, raw, default)
                return default
            return value

        def optional_int(name: str) -> int | None:
            raw = env.get(name)
            if raw is None or not raw.strip():
                return None
            try:
                return int(raw)
            except ValueError:
                sink.warning("⚠️ Invalid %s value %r, ignoring it", name, raw)
                return None

        raw_parse_mode = env.get("PARSE_MODE")
        parse_mode = ParseMode.HTML if raw_parse_mode is None else ParseMode.parse(raw_parse_mode)

        retry = RetryPolicy(
            max_retries=int(number("MAX_RETRIES", 3)),
            base_delay=number("RETRY_DELAY", 1.0),
            max_rate_limit_retries=int(number("MAX_RATE_LIMIT_RETRIES", 5)),
            rate_limit_delay=number("RATE_LIMIT_DELAY", 30.0),
        )

        return cls(
            telegram_token=env.get("TELEGRAM_TOKEN", "").strip(),
            chat_id=env.get("CHAT_ID", "").strip(),
            message=env.get("MESSAGE", ""),
            template=text("TEMPLATE"),
            language=(env.get("LANGUAGE") or "en").strip().lower(),
            template_vars=text("TEMPLATE_VARS"),
            parse_mode=parse_mode,
            message_thread_id=optional_int("MESSAGE_THREAD_ID"),
            message_id=optional_int("MESSAGE_ID"),
            reply_to_message_id=optional_int("REPLY_TO_MESSAGE_ID"),
            disable_web_page_preview=parse_bool(env.get("DISABLE_WEB_PAGE_PREVIEW")),
            disable_notification=parse_bool(env.get("DISABLE_NOTIFICATION")),
            protect_content=parse_bool(env.get("PROTECT_CONTENT")),
            inline_keyboard=text("INLINE_KEYBOARD"),
            file_path=text("FILE_PATH"),
            file_base64=text("FILE_BASE64"),
            file_name=text("FILE_NAME"),
            file_type=env.get("FILE_TYPE") or "document",
            caption=text("CAPTION"),
            force_as_photo=parse_bool(env.get("FORCE_AS_PHOTO")),
            retry=retry,
            send_on_failure=parse_bool(env.get("SEND_ON_FAILURE")),
            send_on_success=parse_bool(env.get("SEND_ON_SUCCESS")),
            job_status=(env.get("JOB_STATUS") or "").strip().lower(),
            event_path=text("GITHUB_EVENT_PATH"),
            event_name=text("GITHUB_EVENT_NAME"),
            api_url=(env.get("TELEGRAM_API_URL") or "").strip() or DEFAULT_API_URL,
        )


def parse_bool(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES
