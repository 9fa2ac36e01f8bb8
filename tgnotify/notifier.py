"""Notification pipeline.

Stages:
1. Validate required inputs (no network activity before this passes)
2. Conditional-send gates (SEND_ON_FAILURE / SEND_ON_SUCCESS)
3. Context: platform + event + customMessage + TEMPLATE_VARS
4. Render the template or raw message
5. Sanitize for the declared parse mode
6. Deliver: send file, else edit, else send
7. Report step outputs
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import httpx

from tgnotify.config import NotifyConfig
from tgnotify.context.aggregator import aggregate_context, parse_overrides
from tgnotify.context.events import EventContextExtractor, load_event
from tgnotify.context.platform import platform_context
from tgnotify.delivery.files import load_file, parse_file_type, route_photo
from tgnotify.delivery.telegram import TelegramClient
from tgnotify.errors import NotifyError, RateLimitExhaustedError, RetriesExhaustedError
from tgnotify.i18n import translate
from tgnotify.keyboard import parse_inline_keyboard
from tgnotify.models import DeliveryAction, DeliveryRequest, DeliveryResult, VariableMap
from tgnotify.reporting import OutputSink, WarningSink
from tgnotify.sanitizer.sanitizer import OutputSanitizer
from tgnotify.templates.renderer import render_message, substitute

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Runs one notification from a NotifyConfig to reported outputs."""

    def __init__(
        self,
        config: NotifyConfig,
        outputs: OutputSink,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sink: WarningSink = logger,
        sanitizer: OutputSanitizer | None = None,
    ) -> None:
        self.config = config
        self._outputs = outputs
        self._environ = os.environ if environ is None else environ
        self._sink = sink
        self._sanitizer = sanitizer or OutputSanitizer()
        self._extractor = EventContextExtractor(sink=sink)
        self._client = TelegramClient(
            config.telegram_token,
            policy=config.retry,
            base_url=config.api_url,
            transport=transport,
        )

    async def run(self) -> DeliveryResult:
        """Deliver the notification and report outputs.

        On any error ``success=false`` and the retries consumed are written
        to the outputs before the error propagates.
        """
        lang = self.config.language
        try:
            self.config.require_inputs()

            skip = self.skip_reason()
            if skip is not None:
                logger.info("ℹ️ %s", translate(skip, lang, status=self.config.job_status))
                result = DeliveryResult(action=DeliveryAction.SKIP)
                self._report(result)
                return result

            logger.info("ℹ️ %s", translate("sending", lang))
            request = self.build_request()
            result = await self.deliver(request)
        except Exception as exc:
            if isinstance(exc, NotifyError):
                logger.error("❌ %s", translate("failed", lang, error=exc))
            else:
                logger.exception("❌ %s", translate("failed", lang, error=exc))
            self._outputs.set("success", False)
            self._outputs.set("retry_count", retries_consumed(exc))
            raise

        self._report(result)
        return result

    def skip_reason(self) -> str | None:
        """Message key explaining why delivery is skipped, or None to send."""
        status = self.config.job_status
        if self.config.send_on_failure and status != "failure":
            return "skip_not_failure"
        if self.config.send_on_success and status != "success":
            return "skip_not_success"
        return None

    def build_context(self) -> VariableMap:
        platform = platform_context(self._environ)
        event = load_event(self.config.event_path, self._sink)
        event_ctx = self._extractor.extract(self.config.event_name, event, platform)
        overrides = parse_overrides(self.config.template_vars, self._sink)
        return aggregate_context(platform, event_ctx, self.config.message, overrides)

    def render_text(self, context: VariableMap | None = None) -> str:
        """Rendered and sanitized message body; raises TemplateNotFoundError."""
        cfg = self.config
        if context is None:
            context = self.build_context()
        if cfg.template:
            logger.debug("%s", translate("using_template", cfg.language, template=cfg.template))
        text = render_message(
            context,
            message=cfg.message,
            template=cfg.template,
            language=cfg.language,
            parse_mode=cfg.parse_mode,
        )
        return self._sanitizer.sanitize(text, cfg.parse_mode)

    def build_request(self) -> DeliveryRequest:
        cfg = self.config
        context = self.build_context()
        text = self.render_text(context)

        file = None
        if cfg.has_file:
            file = load_file(
                parse_file_type(cfg.file_type),
                file_path=cfg.file_path,
                file_base64=cfg.file_base64,
                file_name=cfg.file_name,
            )
            file = route_photo(file, cfg.force_as_photo, self._sink)
            logger.info(
                "ℹ️ %s",
                translate(
                    "sending_file", cfg.language,
                    file_type=file.file_type.value, file_name=file.file_name,
                ),
            )
            if cfg.caption:
                text = self._sanitizer.sanitize(substitute(cfg.caption, context), cfg.parse_mode)

        return DeliveryRequest(
            chat_id=cfg.chat_id,
            text=text,
            parse_mode=cfg.parse_mode,
            message_thread_id=cfg.message_thread_id,
            reply_to_message_id=cfg.reply_to_message_id,
            message_id=cfg.message_id,
            disable_web_page_preview=cfg.disable_web_page_preview,
            disable_notification=cfg.disable_notification,
            protect_content=cfg.protect_content,
            reply_markup=parse_inline_keyboard(cfg.inline_keyboard, context, self._sink),
            file=file,
        )

    async def deliver(self, request: DeliveryRequest) -> DeliveryResult:
        # A file wins over an edit target when both are given.
        if request.file is not None:
            return await self._client.send_file(request)
        if request.message_id is not None:
            return await self._client.edit_message(request)
        return await self._client.send_message(request)

    def _report(self, result: DeliveryResult) -> None:
        self._outputs.set("message_id", result.message_id)
        self._outputs.set("success", True)
        self._outputs.set("retry_count", result.retry_count)
        if result.file_id:
            self._outputs.set("file_id", result.file_id)

        key = {
            DeliveryAction.SEND: "message_sent",
            DeliveryAction.EDIT: "message_edited",
            DeliveryAction.SEND_FILE: "file_sent",
        }.get(result.action)
        if key is not None:
            logger.info("✅ %s", translate(key, self.config.language, message_id=result.message_id))


def retries_consumed(error: Exception) -> int:
    """General retries used before ``error`` ended the run."""
    if isinstance(error, RetriesExhaustedError):
        return max(error.attempts - 1, 0)
    if isinstance(error, RateLimitExhaustedError):
        return error.retries
    return 0
