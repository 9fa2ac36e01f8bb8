"""Shared test fixtures for telegram-notify."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from tgnotify.config import NotifyConfig
from tgnotify.delivery.retry import RetryPolicy
from tgnotify.models import DeliveryRequest, FilePayload, FileType

BOT_TOKEN = "123456:TEST-TOKEN"
CHAT_ID = "-100123"


class RecordingSink:
    """Warning sink that keeps formatted messages."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def warning(self, msg: str, *args: object) -> None:
        self.messages.append(msg % args if args else msg)

    def contains(self, fragment: str) -> bool:
        return any(fragment in m for m in self.messages)


class MemoryOutputs:
    """Output sink that keeps the last value per name."""

    def __init__(self) -> None:
        self.values: dict[str, object] = {}

    def set(self, name: str, value: object) -> None:
        self.values[name] = value


class FakeTelegram:
    """Scripted Bot API: pops one queued reply per request and records requests."""

    def __init__(self, replies: list[httpx.Response | Callable[[httpx.Request], httpx.Response]]) -> None:
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"unexpected request to {request.url}")
        reply = self._replies.pop(0)
        return reply(request) if callable(reply) else reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def endpoint(self, index: int = 0) -> str:
        return self.requests[index].url.path.rsplit("/", 1)[-1]


# --- Factory functions for test data ---


def ok_response(result: Any = None, status_code: int = 200) -> httpx.Response:
    if result is None:
        result = {"message_id": 42}
    return httpx.Response(status_code, json={"ok": True, "result": result})


def error_response(
    description: str = "Bad Request: chat not found",
    error_code: int = 400,
    retry_after: int | None = None,
) -> httpx.Response:
    body: dict[str, Any] = {"ok": False, "error_code": error_code, "description": description}
    if retry_after is not None:
        body["parameters"] = {"retry_after": retry_after}
    return httpx.Response(error_code, json=body)


def rate_limit_response(retry_after: int = 3) -> httpx.Response:
    return error_response(
        f"Too Many Requests: retry after {retry_after}", 429, retry_after=retry_after,
    )


def make_policy(**kwargs: Any) -> RetryPolicy:
    defaults: dict[str, Any] = {
        "max_retries": 3,
        "base_delay": 1.0,
        "max_rate_limit_retries": 5,
        "rate_limit_delay": 30.0,
    }
    defaults.update(kwargs)
    return RetryPolicy(**defaults)


def make_config(**kwargs: Any) -> NotifyConfig:
    """Factory for NotifyConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "telegram_token": BOT_TOKEN,
        "chat_id": CHAT_ID,
        "message": "Hello from CI",
        "retry": make_policy(),
    }
    defaults.update(kwargs)
    return NotifyConfig(**defaults)


def make_request(**kwargs: Any) -> DeliveryRequest:
    defaults: dict[str, Any] = {"chat_id": CHAT_ID, "text": "hello"}
    defaults.update(kwargs)
    return DeliveryRequest(**defaults)


def make_file(**kwargs: Any) -> FilePayload:
    defaults: dict[str, Any] = {
        "file_type": FileType.DOCUMENT,
        "file_name": "report.txt",
        "content": b"report body",
        "mime_type": "text/plain",
    }
    defaults.update(kwargs)
    return FilePayload(**defaults)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def outputs() -> MemoryOutputs:
    return MemoryOutputs()


@pytest.fixture
def github_env() -> dict[str, str]:
    """Runner environment for a push to main."""
    return {
        "GITHUB_REPOSITORY": "acme/app",
        "GITHUB_REF_NAME": "main",
        "GITHUB_SHA": "abc123def4567890",
        "GITHUB_ACTOR": "alice",
        "GITHUB_WORKFLOW": "CI",
        "GITHUB_JOB": "build",
        "GITHUB_RUN_ID": "987",
        "GITHUB_RUN_NUMBER": "12",
        "GITHUB_RUN_ATTEMPT": "1",
        "GITHUB_EVENT_NAME": "push",
        "GITHUB_SERVER_URL": "https://github.com",
    }
