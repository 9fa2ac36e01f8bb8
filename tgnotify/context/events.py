"""Event context extraction.

Turns the webhook payload GitHub writes to ``$GITHUB_EVENT_PATH`` into flat
template variables. Each event type has a fixed table of named fields
looked up with ``dig`` so that missing nested fields simply leave the key
out. After extraction a fixed set of fallbacks fills the keys templates
commonly reference. Extraction never raises: failures are reported to the
warning sink and the partial map is returned.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from tgnotify.context.lookup import dig, join_names
from tgnotify.models import VariableMap
from tgnotify.reporting import WarningSink

logger = logging.getLogger(__name__)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")

FieldTable = dict[str, tuple[str | int, ...]]


class EventType(str, Enum):
    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_TARGET = "pull_request_target"
    PULL_REQUEST_REVIEW = "pull_request_review"
    RELEASE = "release"
    PUSH = "push"
    WORKFLOW_RUN = "workflow_run"
    DEPLOYMENT = "deployment"
    DEPLOYMENT_STATUS = "deployment_status"
    WORKFLOW_DISPATCH = "workflow_dispatch"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str | None) -> EventType:
        try:
            return cls((name or "").strip())
        except ValueError:
            return cls.UNKNOWN


# --- Field tables ---

_COMMON_FIELDS: FieldTable = {
    "action": ("action",),
    "triggerUser": ("sender", "login"),
    "triggerUserId": ("sender", "id"),
}

_ISSUE_FIELDS: FieldTable = {
    "issueNumber": ("issue", "number"),
    "issueTitle": ("issue", "title"),
    "issueBody": ("issue", "body"),
    "issueState": ("issue", "state"),
    "issueUrl": ("issue", "html_url"),
    "author": ("issue", "user", "login"),
    "createdAt": ("issue", "created_at"),
    "updatedAt": ("issue", "updated_at"),
}

_ISSUE_COMMENT_FIELDS: FieldTable = {
    "issueNumber": ("issue", "number"),
    "issueTitle": ("issue", "title"),
    "issueUrl": ("issue", "html_url"),
    "commentId": ("comment", "id"),
    "commentBody": ("comment", "body"),
    "commentUrl": ("comment", "html_url"),
    "author": ("comment", "user", "login"),
    "createdAt": ("comment", "created_at"),
}

_PULL_REQUEST_FIELDS: FieldTable = {
    "prNumber": ("pull_request", "number"),
    "prTitle": ("pull_request", "title"),
    "prBody": ("pull_request", "body"),
    "prState": ("pull_request", "state"),
    "prUrl": ("pull_request", "html_url"),
    "prDraft": ("pull_request", "draft"),
    "prMerged": ("pull_request", "merged"),
    "author": ("pull_request", "user", "login"),
    "prBaseRef": ("pull_request", "base", "ref"),
    "prHeadRef": ("pull_request", "head", "ref"),
    "prHeadSha": ("pull_request", "head", "sha"),
    "baseBranch": ("pull_request", "base", "ref"),
    "headBranch": ("pull_request", "head", "ref"),
    "branchName": ("pull_request", "head", "ref"),
    "prCommits": ("pull_request", "commits"),
    "prAdditions": ("pull_request", "additions"),
    "prDeletions": ("pull_request", "deletions"),
    "prChangedFiles": ("pull_request", "changed_files"),
    "prComments": ("pull_request", "comments"),
    "prReviewComments": ("pull_request", "review_comments"),
    "createdAt": ("pull_request", "created_at"),
    "updatedAt": ("pull_request", "updated_at"),
}

_REVIEW_FIELDS: FieldTable = {
    "prNumber": ("pull_request", "number"),
    "prTitle": ("pull_request", "title"),
    "prUrl": ("pull_request", "html_url"),
    "author": ("pull_request", "user", "login"),
    "reviewId": ("review", "id"),
    "reviewAuthor": ("review", "user", "login"),
    "reviewState": ("review", "state"),
    "reviewBody": ("review", "body"),
    "reviewUrl": ("review", "html_url"),
}

_RELEASE_FIELDS: FieldTable = {
    "releaseId": ("release", "id"),
    "releaseTag": ("release", "tag_name"),
    "releaseName": ("release", "name"),
    "releaseBody": ("release", "body"),
    "releaseNotes": ("release", "body"),
    "releaseUrl": ("release", "html_url"),
    "releaseAuthor": ("release", "author", "login"),
    "isPrerelease": ("release", "prerelease"),
    "isDraft": ("release", "draft"),
}

_PUSH_FIELDS: FieldTable = {
    "commitId": ("head_commit", "id"),
    "commitMessage": ("head_commit", "message"),
    "commitAuthor": ("head_commit", "author", "name"),
    "commitUrl": ("head_commit", "url"),
    "compareUrl": ("compare",),
    "pusher": ("pusher", "name"),
    "forced": ("forced",),
    "beforeSha": ("before",),
    "afterSha": ("after",),
}

_WORKFLOW_RUN_FIELDS: FieldTable = {
    "workflowName": ("workflow_run", "name"),
    "workflowRunId": ("workflow_run", "id"),
    "workflowRunNumber": ("workflow_run", "run_number"),
    "workflowStatus": ("workflow_run", "status"),
    "workflowConclusion": ("workflow_run", "conclusion"),
    "workflowRunUrl": ("workflow_run", "html_url"),
    "headBranch": ("workflow_run", "head_branch"),
    "headSha": ("workflow_run", "head_sha"),
    "author": ("workflow_run", "actor", "login"),
}

_DEPLOYMENT_FIELDS: FieldTable = {
    "deploymentId": ("deployment", "id"),
    "environment": ("deployment", "environment"),
    "deployRef": ("deployment", "ref"),
    "deploySha": ("deployment", "sha"),
    "deployTask": ("deployment", "task"),
    "deployDescription": ("deployment", "description"),
    "author": ("deployment", "creator", "login"),
    "createdAt": ("deployment", "created_at"),
}

_DEPLOYMENT_STATUS_FIELDS: FieldTable = {
    "deploymentId": ("deployment", "id"),
    "environment": ("deployment_status", "environment"),
    "deployStatus": ("deployment_status", "state"),
    "deployUrl": ("deployment_status", "target_url"),
    "deployDescription": ("deployment_status", "description"),
    "deployRef": ("deployment", "ref"),
    "author": ("deployment_status", "creator", "login"),
    "createdAt": ("deployment_status", "created_at"),
}


def _copy_fields(ctx: VariableMap, event: Mapping[str, Any], table: FieldTable) -> None:
    for key, path in table.items():
        value = dig(event, *path)
        if isinstance(value, (str, bool, int, float)):
            ctx[key] = value


# --- Per-event extras ---


def _issues(ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any]) -> None:
    _copy_fields(ctx, event, _ISSUE_FIELDS)
    _put(ctx, "labels", join_names(dig(event, "issue", "labels"), "name"))
    _put(ctx, "assignees", join_names(dig(event, "issue", "assignees"), "login"))


def _issue_comment(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    _copy_fields(ctx, event, _ISSUE_COMMENT_FIELDS)
    if dig(event, "issue") is not None:
        ctx["isPullRequest"] = dig(event, "issue", "pull_request") is not None


def _pull_request(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    _copy_fields(ctx, event, _PULL_REQUEST_FIELDS)
    head, base = ctx.get("headBranch"), ctx.get("baseBranch")
    if head and base:
        ctx["branchComparison"] = f"{head} → {base}"
    additions, deletions = ctx.get("prAdditions"), ctx.get("prDeletions")
    if additions is not None or deletions is not None:
        ctx["changesStats"] = f"+{additions or 0} ➕ -{deletions or 0} ➖"
    _put(ctx, "labels", join_names(dig(event, "pull_request", "labels"), "name"))
    _put(ctx, "assignees", join_names(dig(event, "pull_request", "assignees"), "login"))


def _pull_request_review(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    _copy_fields(ctx, event, _REVIEW_FIELDS)


def _release(ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any]) -> None:
    _copy_fields(ctx, event, _RELEASE_FIELDS)
    created = dig(event, "release", "published_at") or dig(event, "release", "created_at")
    _put(ctx, "releaseCreatedAt", created)
    assets = dig(event, "release", "assets")
    if isinstance(assets, list):
        ctx["releaseAssetsCount"] = len(assets)


def _push(ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any]) -> None:
    _copy_fields(ctx, event, _PUSH_FIELDS)
    commits = dig(event, "commits")
    if isinstance(commits, list):
        ctx["commitCount"] = len(commits)
        changed: set[str] = set()
        for commit in commits:
            for kind in ("added", "modified", "removed"):
                files = dig(commit, kind)
                if isinstance(files, list):
                    changed.update(str(f) for f in files)
        ctx["filesChanged"] = len(changed)


def _workflow_run(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    _copy_fields(ctx, event, _WORKFLOW_RUN_FIELDS)


def _deployment(ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any]) -> None:
    _copy_fields(ctx, event, _DEPLOYMENT_FIELDS)


def _deployment_status(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    _copy_fields(ctx, event, _DEPLOYMENT_STATUS_FIELDS)
    if "deployUrl" not in ctx:
        _put(ctx, "deployUrl", dig(event, "deployment_status", "environment_url"))


def _workflow_dispatch(
    ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any],
) -> None:
    version = dig(event, "inputs", "version")
    if not version:
        return
    version = str(version)
    body = dig(event, "inputs", "release_body")
    if not body:
        body = f"Release {version} triggered manually via workflow_dispatch"
    ctx.update({
        "releaseTag": version,
        "releaseName": version,
        "isPrerelease": _truthy(dig(event, "inputs", "prerelease")),
        "isDraft": False,
        "releaseBody": str(body),
        "releaseNotes": str(body),
    })
    _put(ctx, "releaseAuthor", platform.get("actor") or None)
    repository = platform.get("repository")
    if repository:
        server = platform.get("serverUrl") or "https://github.com"
        ctx["releaseUrl"] = f"{server}/{repository}/releases/tag/{version}"


def _unknown(ctx: VariableMap, event: Mapping[str, Any], platform: Mapping[str, Any]) -> None:
    return None


Extractor = Callable[[VariableMap, Mapping[str, Any], Mapping[str, Any]], None]

_EXTRACTORS: dict[EventType, Extractor] = {
    EventType.ISSUES: _issues,
    EventType.ISSUE_COMMENT: _issue_comment,
    EventType.PULL_REQUEST: _pull_request,
    EventType.PULL_REQUEST_TARGET: _pull_request,
    EventType.PULL_REQUEST_REVIEW: _pull_request_review,
    EventType.RELEASE: _release,
    EventType.PUSH: _push,
    EventType.WORKFLOW_RUN: _workflow_run,
    EventType.DEPLOYMENT: _deployment,
    EventType.DEPLOYMENT_STATUS: _deployment_status,
    EventType.WORKFLOW_DISPATCH: _workflow_dispatch,
    EventType.UNKNOWN: _unknown,
}

_missing = set(EventType) - set(_EXTRACTORS)
if _missing:
    raise RuntimeError(f"No extractor for event types: {sorted(t.value for t in _missing)}")


# --- Public API ---


def load_event(path: str | None, sink: WarningSink = logger) -> dict[str, Any] | None:
    """Read the event JSON file; ``None`` (with a warning) when unusable."""
    if not path:
        return None
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        sink.warning("⚠️ Could not read event file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        sink.warning("⚠️ Event file %s does not contain a JSON object", path)
        return None
    return data


class EventContextExtractor:
    """Derives template variables from one event payload."""

    def __init__(
        self,
        sink: WarningSink = logger,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._sink = sink
        self._clock = clock or (lambda: datetime.now(UTC))

    def extract(
        self,
        event_name: str | None,
        event: Mapping[str, Any] | None,
        platform: Mapping[str, Any] | None = None,
    ) -> VariableMap:
        if event is None:
            return {}
        platform = platform or {}
        ctx: VariableMap = {}
        event_type = EventType.from_name(event_name)
        try:
            _copy_fields(ctx, event, _COMMON_FIELDS)
            _EXTRACTORS[event_type](ctx, event, platform)
            self._apply_fallbacks(ctx, platform)
            self._decode_release_body(ctx)
        except Exception as exc:  # extraction must never abort the run
            self._sink.warning(
                "⚠️ Failed to extract %s event context: %s", event_type.value, exc,
            )
        return ctx

    def _apply_fallbacks(self, ctx: VariableMap, platform: Mapping[str, Any]) -> None:
        now = self._clock().isoformat()
        ref_name = platform.get("refName") or ""
        head = ctx.get("headBranch") or platform.get("headRef") or ref_name
        base = ctx.get("baseBranch") or platform.get("baseRef") or ref_name
        defaults: VariableMap = {
            "branchName": head,
            "sourceBranch": head,
            "targetBranch": base,
            "author": platform.get("actor") or "",
            "filesChanged": ctx.get("prChangedFiles", 0),
            "commitCount": ctx.get("prCommits", 0),
            "deployStatus": platform.get("jobStatus") or "unknown",
            "timestamp": now,
            "deployTime": now,
        }
        for key, value in defaults.items():
            ctx.setdefault(key, value)

        if "releaseTag" not in ctx:
            return
        tag = str(ctx["releaseTag"])
        release_defaults: VariableMap = {
            "releaseName": tag,
            "releaseAuthor": platform.get("actor") or "",
            "releaseCreatedAt": now,
            "isPrerelease": False,
            "isDraft": False,
            "releaseBody": "",
        }
        for key, value in release_defaults.items():
            if ctx.get(key) in (None, ""):
                ctx[key] = value
        ctx.setdefault("releaseNotes", ctx["releaseBody"])
        repository = platform.get("repository")
        if "releaseUrl" not in ctx and repository:
            server = platform.get("serverUrl") or "https://github.com"
            ctx["releaseUrl"] = f"{server}/{repository}/releases/tag/{tag}"

    def _decode_release_body(self, ctx: VariableMap) -> None:
        raw = ctx.get("releaseBody")
        if not isinstance(raw, str) or not raw:
            return
        decoded = decode_base64_text(raw, self._sink)
        if decoded == raw:
            return
        ctx["releaseBody"] = decoded
        if ctx.get("releaseNotes") == raw:
            ctx["releaseNotes"] = decoded


def decode_base64_text(value: str, sink: WarningSink = logger) -> str:
    """Decode ``value`` as base64 UTF-8 when it looks like base64.

    Release workflows pass notes base64-encoded so that user-written text
    never lands in workflow syntax. Short plain words can match the
    base64 alphabet too; those fail to decode and come back unchanged.
    """
    compact = value.strip()
    if not _BASE64_RE.match(compact):
        return value
    try:
        return base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        sink.warning("⚠️ Failed to decode base64 release body, using raw value: %s", exc)
        return value


def _put(ctx: VariableMap, key: str, value: Any) -> None:
    if isinstance(value, (str, bool, int, float)):
        ctx[key] = value


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
