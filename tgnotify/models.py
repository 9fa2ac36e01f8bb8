"""Shared Pydantic data models for telegram-notify."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# A flat variable value. Bool is listed first so pydantic keeps True/False
# instead of coercing them to 1/0.
VariableValue = Union[bool, int, float, str]
VariableMap = dict[str, VariableValue]

# --- Enums ---


class ParseMode(str, Enum):
    HTML = "HTML"
    MARKDOWN = "Markdown"
    MARKDOWN_V2 = "MarkdownV2"
    NONE = ""

    @classmethod
    def parse(cls, value: str | None) -> ParseMode:
        """Map a user-supplied parse mode onto a member, case-insensitively."""
        if not value:
            return cls.NONE
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        return cls.NONE


class FileType(str, Enum):
    PHOTO = "photo"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    ANIMATION = "animation"
    VOICE = "voice"
    VIDEO_NOTE = "video_note"
    STICKER = "sticker"


class DeliveryAction(str, Enum):
    SEND = "send"
    EDIT = "edit"
    SEND_FILE = "send_file"
    SKIP = "skip"


# --- Delivery Models ---


class FilePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_type: FileType
    file_name: str
    content: bytes
    mime_type: str = "application/octet-stream"


class DeliveryRequest(BaseModel):
    """One immutable unit of delivery; retried unmodified on failure."""

    model_config = ConfigDict(frozen=True)

    chat_id: str
    text: str = ""
    parse_mode: ParseMode = ParseMode.HTML
    message_thread_id: int | None = None
    reply_to_message_id: int | None = None
    message_id: int | None = None
    disable_web_page_preview: bool = False
    disable_notification: bool = False
    protect_content: bool = False
    reply_markup: dict[str, Any] | None = None
    file: FilePayload | None = None


class ResponseParameters(BaseModel):
    retry_after: int | None = None
    migrate_to_chat_id: int | None = None


class TelegramResponse(BaseModel):
    """The Bot API response envelope."""

    ok: bool
    result: Any = None
    description: str | None = None
    error_code: int | None = None
    parameters: ResponseParameters | None = None


class DeliveryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: DeliveryAction
    message_id: str = ""
    file_id: str | None = None
    retry_count: int = Field(default=0, ge=0)
    rate_limit_count: int = Field(default=0, ge=0)
