"""Telegram Bot API client.

Sends messages, edits and files through the Bot API and retries failed
calls with two independent budgets (see ``tgnotify.delivery.retry``).
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from tgnotify.delivery.files import endpoint_for, extract_file_id
from tgnotify.delivery.retry import RetryPolicy, RetryState, is_rate_limited
from tgnotify.errors import (
    InvalidEndpointError,
    RateLimitExhaustedError,
    RetriesExhaustedError,
    TelegramAPIError,
)
from tgnotify.models import (
    DeliveryAction,
    DeliveryRequest,
    DeliveryResult,
    ParseMode,
    TelegramResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.telegram.org"
_TIMEOUT_SECONDS = 30.0


@dataclass
class ApiCall:
    """A successful Bot API call and the retries it consumed."""

    response: TelegramResponse
    retries: int = 0
    rate_limit_retries: int = 0


class TelegramClient:
    """Bot API client with general and rate-limit retry budgets."""

    def __init__(
        self,
        bot_token: str,
        policy: RetryPolicy | None = None,
        base_url: str = DEFAULT_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = _TIMEOUT_SECONDS,
    ) -> None:
        self._bot_token = bot_token
        self._policy = policy or RetryPolicy()
        self._base_url = f"{base_url.rstrip('/')}/bot{bot_token}"
        self._transport = transport
        self._timeout = timeout

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint}"

    async def send_message(self, request: DeliveryRequest) -> DeliveryResult:
        call = await self.request("sendMessage", build_message_payload(request))
        return DeliveryResult(
            action=DeliveryAction.SEND,
            message_id=str(_result_field(call.response, "message_id")),
            retry_count=call.retries,
            rate_limit_count=call.rate_limit_retries,
        )

    async def edit_message(self, request: DeliveryRequest) -> DeliveryResult:
        call = await self.request("editMessageText", build_edit_payload(request))
        return DeliveryResult(
            action=DeliveryAction.EDIT,
            message_id=str(request.message_id),
            retry_count=call.retries,
            rate_limit_count=call.rate_limit_retries,
        )

    async def send_file(self, request: DeliveryRequest) -> DeliveryResult:
        if request.file is None:
            raise ValueError("send_file requires a file payload")
        endpoint, field = endpoint_for(request.file.file_type)
        files = {
            field: (request.file.file_name, request.file.content, request.file.mime_type),
        }
        call = await self.request(endpoint, data=build_file_form(request), files=files)
        return DeliveryResult(
            action=DeliveryAction.SEND_FILE,
            message_id=str(_result_field(call.response, "message_id")),
            file_id=extract_file_id(call.response.result, request.file.file_type),
            retry_count=call.retries,
            rate_limit_count=call.rate_limit_retries,
        )

    async def request(
        self,
        endpoint: str,
        payload: dict[str, Any] | None = None,
        *,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> ApiCall:
        """POST to ``endpoint`` until success or until a budget runs out.

        Rate-limited failures wait the advised delay and retry the same
        attempt slot; all other failures back off exponentially.
        """
        url = self.endpoint_url(endpoint)
        state = RetryState(self._policy)

        async with httpx.AsyncClient(
            verify=True, timeout=self._timeout, transport=self._transport,
        ) as client:
            while True:
                try:
                    response = await self._post_once(client, url, payload, data, files)
                    return ApiCall(
                        response=response,
                        retries=state.attempts,
                        rate_limit_retries=state.rate_limit_retries,
                    )
                except TelegramAPIError as exc:
                    if is_rate_limited(exc):
                        if state.rate_limit_exhausted:
                            raise RateLimitExhaustedError(
                                exc, state.rate_limit_retries, state.attempts,
                            ) from exc
                        delay = state.next_rate_limit_wait(exc)
                        logger.warning(
                            "⚠️ Rate limited on %s, waiting %ss (%d/%d)",
                            endpoint, delay, state.rate_limit_retries,
                            self._policy.max_rate_limit_retries,
                        )
                    else:
                        if state.general_exhausted:
                            raise RetriesExhaustedError(exc, state.attempts + 1) from exc
                        delay = state.next_backoff()
                        logger.warning(
                            "⚠️ %s failed (%s), retrying in %ss (%d/%d)",
                            endpoint, exc, delay, state.attempts,
                            self._policy.max_retries,
                        )
                    await asyncio.sleep(delay)

    async def _post_once(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict[str, Any] | None,
        data: dict[str, str] | None,
        files: dict[str, tuple[str, bytes, str]] | None,
    ) -> TelegramResponse:
        try:
            if files is not None:
                resp = await client.post(url, data=data, files=files)
            else:
                resp = await client.post(url, json=payload)
        except httpx.InvalidURL as exc:
            raise InvalidEndpointError(
                f"Invalid Telegram API URL: {self._redact(str(exc))}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TelegramAPIError(f"Request failed: {self._redact(str(exc))}") from exc

        try:
            envelope = TelegramResponse.model_validate(resp.json())
        except ValueError:  # malformed JSON or envelope
            raise TelegramAPIError(
                f"Invalid response from Telegram API (HTTP {resp.status_code})",
                error_code=resp.status_code,
            ) from None

        if not envelope.ok or resp.status_code >= 400:
            retry_after = envelope.parameters.retry_after if envelope.parameters else None
            raise TelegramAPIError(
                f"Telegram API error: {envelope.description or 'Unknown error'}",
                error_code=envelope.error_code or resp.status_code,
                retry_after=retry_after,
            )
        return envelope

    def _redact(self, text: str) -> str:
        return text.replace(self._bot_token, "***") if self._bot_token else text


def build_message_payload(request: DeliveryRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chat_id": request.chat_id,
        "text": request.text,
        "disable_web_page_preview": request.disable_web_page_preview,
        "disable_notification": request.disable_notification,
        "protect_content": request.protect_content,
    }
    if request.parse_mode is not ParseMode.NONE:
        payload["parse_mode"] = request.parse_mode.value
    if request.message_thread_id is not None:
        payload["message_thread_id"] = request.message_thread_id
    if request.reply_to_message_id is not None:
        payload["reply_to_message_id"] = request.reply_to_message_id
    if request.reply_markup is not None:
        payload["reply_markup"] = request.reply_markup
    return payload


def build_edit_payload(request: DeliveryRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chat_id": request.chat_id,
        "message_id": request.message_id,
        "text": request.text,
        "disable_web_page_preview": request.disable_web_page_preview,
    }
    if request.parse_mode is not ParseMode.NONE:
        payload["parse_mode"] = request.parse_mode.value
    if request.reply_markup is not None:
        payload["reply_markup"] = request.reply_markup
    return payload


def build_file_form(request: DeliveryRequest) -> dict[str, str]:
    """Multipart form fields; every value is a string."""
    form: dict[str, str] = {
        "chat_id": request.chat_id,
        "disable_notification": _flag(request.disable_notification),
        "protect_content": _flag(request.protect_content),
    }
    if request.text:
        form["caption"] = request.text
        if request.parse_mode is not ParseMode.NONE:
            form["parse_mode"] = request.parse_mode.value
    if request.message_thread_id is not None:
        form["message_thread_id"] = str(request.message_thread_id)
    if request.reply_to_message_id is not None:
        form["reply_to_message_id"] = str(request.reply_to_message_id)
    if request.reply_markup is not None:
        form["reply_markup"] = json.dumps(request.reply_markup)
    return form


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _result_field(response: TelegramResponse, name: str) -> Any:
    result = response.result
    if isinstance(result, dict):
        return result.get(name, "")
    return ""
