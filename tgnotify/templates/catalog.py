"""Built-in message templates.

Bodies are authored once per language with ``<b>`` and ``<code>`` markup
and turned into per-format variants on lookup: HTML keeps the tags,
Markdown uses ``*bold*`` and backticks, every other format gets plain
text. Every template must have an English body; other languages fall
back to English.
"""

from __future__ import annotations

import re
from enum import Enum
from functools import lru_cache

from tgnotify.errors import TemplateNotFoundError
from tgnotify.models import ParseMode

DEFAULT_LANGUAGE = "en"


class TemplateName(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEPLOY = "deploy"
    TEST = "test"
    RELEASE = "release"
    PULL_REQUEST = "pull_request"


TEMPLATES: dict[TemplateName, dict[str, str]] = {
    TemplateName.SUCCESS: {
        "en": (
            "✅ <b>Success</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Branch:</b> {{refName}}\n"
            "<b>Commit:</b> <code>{{sha}}</code>\n"
            "<b>Actor:</b> {{actor}}\n"
            "<b>Workflow:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "✅ <b>Успех</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Ветка:</b> {{refName}}\n"
            "<b>Коммит:</b> <code>{{sha}}</code>\n"
            "<b>Автор:</b> {{actor}}\n"
            "<b>Workflow:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
        "zh": (
            "✅ <b>成功</b>\n\n"
            "<b>仓库:</b> {{repository}}\n"
            "<b>分支:</b> {{refName}}\n"
            "<b>提交:</b> <code>{{sha}}</code>\n"
            "<b>执行者:</b> {{actor}}\n"
            "<b>工作流:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.ERROR: {
        "en": (
            "❌ <b>Error</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Branch:</b> {{refName}}\n"
            "<b>Commit:</b> <code>{{sha}}</code>\n"
            "<b>Status:</b> {{jobStatus}}\n"
            "<b>Run:</b> {{runUrl}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "❌ <b>Ошибка</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Ветка:</b> {{refName}}\n"
            "<b>Коммит:</b> <code>{{sha}}</code>\n"
            "<b>Статус:</b> {{jobStatus}}\n"
            "<b>Запуск:</b> {{runUrl}}\n\n"
            "{{customMessage}}"
        ),
        "zh": (
            "❌ <b>错误</b>\n\n"
            "<b>仓库:</b> {{repository}}\n"
            "<b>分支:</b> {{refName}}\n"
            "<b>提交:</b> <code>{{sha}}</code>\n"
            "<b>状态:</b> {{jobStatus}}\n"
            "<b>运行:</b> {{runUrl}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.WARNING: {
        "en": (
            "⚠️ <b>Warning</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Branch:</b> {{refName}}\n"
            "<b>Workflow:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "⚠️ <b>Предупреждение</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Ветка:</b> {{refName}}\n"
            "<b>Workflow:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
        "zh": (
            "⚠️ <b>警告</b>\n\n"
            "<b>仓库:</b> {{repository}}\n"
            "<b>分支:</b> {{refName}}\n"
            "<b>工作流:</b> {{workflow}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.INFO: {
        "en": (
            "ℹ️ <b>Information</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Event:</b> {{eventName}}\n"
            "<b>Actor:</b> {{actor}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "ℹ️ <b>Информация</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Событие:</b> {{eventName}}\n"
            "<b>Автор:</b> {{actor}}\n\n"
            "{{customMessage}}"
        ),
        "zh": (
            "ℹ️ <b>信息</b>\n\n"
            "<b>仓库:</b> {{repository}}\n"
            "<b>事件:</b> {{eventName}}\n"
            "<b>执行者:</b> {{actor}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.DEPLOY: {
        "en": (
            "🚀 <b>Deployment</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Branch:</b> {{branchName}}\n"
            "<b>Commit:</b> <code>{{shortSha}}</code>\n"
            "<b>Status:</b> {{deployStatus}}\n"
            "<b>Time:</b> {{deployTime}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "🚀 <b>Развертывание</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Ветка:</b> {{branchName}}\n"
            "<b>Коммит:</b> <code>{{shortSha}}</code>\n"
            "<b>Статус:</b> {{deployStatus}}\n"
            "<b>Время:</b> {{deployTime}}\n\n"
            "{{customMessage}}"
        ),
        "zh": (
            "🚀 <b>部署</b>\n\n"
            "<b>仓库:</b> {{repository}}\n"
            "<b>分支:</b> {{branchName}}\n"
            "<b>提交:</b> <code>{{shortSha}}</code>\n"
            "<b>状态:</b> {{deployStatus}}\n"
            "<b>时间:</b> {{deployTime}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.TEST: {
        "en": (
            "🧪 <b>Test Results</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Branch:</b> {{branchName}}\n"
            "<b>Status:</b> {{jobStatus}}\n"
            "<b>Run:</b> #{{runNumber}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "🧪 <b>Результаты тестов</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Ветка:</b> {{branchName}}\n"
            "<b>Статус:</b> {{jobStatus}}\n"
            "<b>Запуск:</b> #{{runNumber}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.RELEASE: {
        "en": (
            "🎉 <b>New Release: {{releaseName}}</b>\n\n"
            "<b>Repository:</b> {{repository}}\n"
            "<b>Tag:</b> <code>{{releaseTag}}</code>\n"
            "<b>Author:</b> {{releaseAuthor}}\n"
            "<b>Published:</b> {{releaseCreatedAt}}\n\n"
            "{{releaseBody}}\n\n"
            "{{releaseUrl}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "🎉 <b>Новый релиз: {{releaseName}}</b>\n\n"
            "<b>Репозиторий:</b> {{repository}}\n"
            "<b>Тег:</b> <code>{{releaseTag}}</code>\n"
            "<b>Автор:</b> {{releaseAuthor}}\n"
            "<b>Опубликован:</b> {{releaseCreatedAt}}\n\n"
            "{{releaseBody}}\n\n"
            "{{releaseUrl}}\n\n"
            "{{customMessage}}"
        ),
    },
    TemplateName.PULL_REQUEST: {
        "en": (
            "🔀 <b>Pull Request #{{prNumber}}</b>\n\n"
            "<b>Title:</b> {{prTitle}}\n"
            "<b>Author:</b> {{author}}\n"
            "<b>Branches:</b> {{branchComparison}}\n"
            "<b>Changes:</b> {{changesStats}} in {{prChangedFiles}} files\n\n"
            "{{prUrl}}\n\n"
            "{{customMessage}}"
        ),
        "ru": (
            "🔀 <b>Pull Request #{{prNumber}}</b>\n\n"
            "<b>Заголовок:</b> {{prTitle}}\n"
            "<b>Автор:</b> {{author}}\n"
            "<b>Ветки:</b> {{branchComparison}}\n"
            "<b>Изменения:</b> {{changesStats}}, файлов: {{prChangedFiles}}\n\n"
            "{{prUrl}}\n\n"
            "{{customMessage}}"
        ),
    },
}

_missing_default = [
    name.value for name in TemplateName if DEFAULT_LANGUAGE not in TEMPLATES.get(name, {})
]
if _missing_default:
    raise RuntimeError(f"Templates without an '{DEFAULT_LANGUAGE}' body: {_missing_default}")

_BOLD_RE = re.compile(r"<b>(.*?)</b>", re.DOTALL)
_CODE_RE = re.compile(r"<code>(.*?)</code>", re.DOTALL)


def template_names() -> list[str]:
    return [name.value for name in TemplateName]


def available_languages(name: TemplateName) -> list[str]:
    return sorted(TEMPLATES[name])


def _to_format(body: str, parse_mode: ParseMode) -> str:
    if parse_mode is ParseMode.HTML:
        return body
    if parse_mode is ParseMode.MARKDOWN:
        body = _BOLD_RE.sub(r"*\1*", body)
        return _CODE_RE.sub(r"`\1`", body)
    body = _BOLD_RE.sub(r"\1", body)
    return _CODE_RE.sub(r"\1", body)


@lru_cache(maxsize=None)
def resolve_template(name: str, language: str = DEFAULT_LANGUAGE,
                     parse_mode: ParseMode = ParseMode.HTML) -> str:
    """Return the body for ``name`` in ``language`` and ``parse_mode``."""
    try:
        template = TemplateName(name.strip().lower())
    except ValueError:
        raise TemplateNotFoundError(name) from None
    bodies = TEMPLATES[template]
    body = bodies.get(language) or bodies[DEFAULT_LANGUAGE]
    return _to_format(body, parse_mode)
