"""File attachments: loading, size limits and endpoint mapping."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from pathlib import Path
from typing import Any

from tgnotify.errors import FileSourceError
from tgnotify.models import FilePayload, FileType
from tgnotify.reporting import WarningSink

_MB = 1024 * 1024

# Bot API upload limits per media kind.
SIZE_LIMITS: dict[FileType, int] = {
    FileType.PHOTO: 10 * _MB,
    FileType.STICKER: 512 * 1024,
}
_DEFAULT_LIMIT = 50 * _MB

# C2PA content credentials live in JUMBF boxes.
_CONTENT_CREDENTIAL_MARKERS = (b"c2pa", b"C2PA", b"jumb")

_ENDPOINTS: dict[FileType, str] = {
    FileType.PHOTO: "sendPhoto",
    FileType.DOCUMENT: "sendDocument",
    FileType.VIDEO: "sendVideo",
    FileType.AUDIO: "sendAudio",
    FileType.ANIMATION: "sendAnimation",
    FileType.VOICE: "sendVoice",
    FileType.VIDEO_NOTE: "sendVideoNote",
    FileType.STICKER: "sendSticker",
}


def parse_file_type(value: str | None) -> FileType:
    if not value:
        return FileType.DOCUMENT
    try:
        return FileType(value.strip().lower())
    except ValueError:
        raise FileSourceError(f"Invalid file type: {value}") from None


def endpoint_for(file_type: FileType) -> tuple[str, str]:
    """Return (endpoint, multipart field name) for a media kind."""
    return _ENDPOINTS[file_type], file_type.value


def load_file(
    file_type: FileType,
    file_path: str | None = None,
    file_base64: str | None = None,
    file_name: str | None = None,
) -> FilePayload:
    """Read the attachment from disk or from base64 text."""
    if file_path:
        path = Path(file_path)
        if not path.is_file():
            raise FileSourceError(f"File not found: {file_path}")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileSourceError(f"Cannot read file {file_path}: {exc}") from exc
        name = file_name or path.name
    elif file_base64:
        if not file_name:
            raise FileSourceError("FILE_NAME is required when using FILE_BASE64")
        try:
            # encoders wrap at 76 columns
            content = base64.b64decode("".join(file_base64.split()), validate=True)
        except binascii.Error as exc:
            raise FileSourceError(f"Invalid base64 file data: {exc}") from exc
        name = file_name
    else:
        raise FileSourceError("No file source given")

    limit = SIZE_LIMITS.get(file_type, _DEFAULT_LIMIT)
    if len(content) > limit:
        raise FileSourceError(
            f"File too large for {file_type.value}: {len(content)} bytes (limit {limit})"
        )

    mime_type, _ = mimetypes.guess_type(name)
    return FilePayload(
        file_type=file_type,
        file_name=name,
        content=content,
        mime_type=mime_type or "application/octet-stream",
    )


def extract_file_id(result: Any, file_type: FileType) -> str | None:
    """Pick the uploaded file's id out of a send* result."""
    if not isinstance(result, dict):
        return None
    media = result.get(file_type.value)
    if file_type is FileType.PHOTO and isinstance(media, list) and media:
        # Photo results list every size; the last one is the largest.
        media = media[-1]
    if isinstance(media, dict) and "file_id" in media:
        return str(media["file_id"])
    # Telegram may store e.g. a GIF sent as animation under "document".
    for value in result.values():
        if isinstance(value, dict) and "file_id" in value:
            return str(value["file_id"])
    return None


def has_content_credentials(content: bytes) -> bool:
    return any(marker in content for marker in _CONTENT_CREDENTIAL_MARKERS)


def route_photo(file: FilePayload, force_as_photo: bool, sink: WarningSink) -> FilePayload:
    """Send photos carrying C2PA metadata as documents unless forced.

    Telegram recompresses photos and drops their metadata; a document
    upload keeps the bytes intact.
    """
    if file.file_type is not FileType.PHOTO or not has_content_credentials(file.content):
        return file
    if force_as_photo:
        sink.warning("⚠️ Forcing to send as photo as requested")
        return file
    sink.warning("⚠️ Switching from photo to document type")
    return file.model_copy(update={"file_type": FileType.DOCUMENT})
