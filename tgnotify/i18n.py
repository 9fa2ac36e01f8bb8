"""Localised operator-facing status lines."""

from __future__ import annotations

DEFAULT_LANGUAGE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "sending": "Sending Telegram notification...",
        "using_template": "Using template: {template}",
        "sending_file": "Sending {file_type}: {file_name}",
        "message_sent": "Message sent successfully! Message ID: {message_id}",
        "message_edited": "Message edited successfully! Message ID: {message_id}",
        "file_sent": "File sent successfully! Message ID: {message_id}",
        "skip_not_failure": "Skipping notification: send_on_failure is set and job status is '{status}'",
        "skip_not_success": "Skipping notification: send_on_success is set and job status is '{status}'",
        "failed": "Failed to send notification: {error}",
        "token_required": "TELEGRAM_TOKEN is required",
        "chat_id_required": "CHAT_ID is required",
        "message_required": "Either MESSAGE, FILE_PATH, or TEMPLATE is required",
        "file_name_required": "FILE_NAME is required when using FILE_BASE64",
    },
    "ru": {
        "sending": "Отправка уведомления в Telegram...",
        "using_template": "Используется шаблон: {template}",
        "sending_file": "Отправка файла ({file_type}): {file_name}",
        "message_sent": "Сообщение успешно отправлено! ID сообщения: {message_id}",
        "message_edited": "Сообщение успешно изменено! ID сообщения: {message_id}",
        "file_sent": "Файл успешно отправлен! ID сообщения: {message_id}",
        "skip_not_failure": "Уведомление пропущено: задан send_on_failure, статус задачи '{status}'",
        "skip_not_success": "Уведомление пропущено: задан send_on_success, статус задачи '{status}'",
        "failed": "Не удалось отправить уведомление: {error}",
        "token_required": "Требуется TELEGRAM_TOKEN",
        "chat_id_required": "Требуется CHAT_ID",
        "message_required": "Требуется MESSAGE, FILE_PATH или TEMPLATE",
        "file_name_required": "При использовании FILE_BASE64 требуется FILE_NAME",
    },
    "zh": {
        "sending": "正在发送 Telegram 通知...",
        "using_template": "使用模板: {template}",
        "sending_file": "正在发送文件 ({file_type}): {file_name}",
        "message_sent": "消息发送成功! 消息 ID: {message_id}",
        "message_edited": "消息编辑成功! 消息 ID: {message_id}",
        "file_sent": "文件发送成功! 消息 ID: {message_id}",
        "skip_not_failure": "跳过通知: 已设置 send_on_failure, 任务状态为 '{status}'",
        "skip_not_success": "跳过通知: 已设置 send_on_success, 任务状态为 '{status}'",
        "failed": "发送通知失败: {error}",
        "token_required": "需要 TELEGRAM_TOKEN",
        "chat_id_required": "需要 CHAT_ID",
        "message_required": "需要 MESSAGE、FILE_PATH 或 TEMPLATE 之一",
        "file_name_required": "使用 FILE_BASE64 时需要 FILE_NAME",
    },
}


def translate(key: str, language: str = DEFAULT_LANGUAGE, **params: object) -> str:
    """Look up ``key`` in ``language``, falling back to English."""
    catalog = MESSAGES.get(language, MESSAGES[DEFAULT_LANGUAGE])
    template = catalog.get(key) or MESSAGES[DEFAULT_LANGUAGE][key]
    return template.format(**params)
