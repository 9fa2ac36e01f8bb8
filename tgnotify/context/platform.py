"""Platform context: the GitHub Actions runner environment as variables."""

from __future__ import annotations

from collections.abc import Mapping

from tgnotify.models import VariableMap

_DEFAULT_SERVER_URL = "https://github.com"


def platform_context(environ: Mapping[str, str]) -> VariableMap:
    """Build the lowest-precedence variable layer from ``GITHUB_*`` variables."""

    def env(name: str) -> str:
        return environ.get(name, "")

    repository = env("GITHUB_REPOSITORY")
    owner, _, repository_name = repository.partition("/")
    server_url = env("GITHUB_SERVER_URL") or _DEFAULT_SERVER_URL
    sha = env("GITHUB_SHA")
    ref_name = env("GITHUB_REF_NAME")
    head_ref = env("GITHUB_HEAD_REF")
    run_id = env("GITHUB_RUN_ID")

    repository_url = f"{server_url}/{repository}" if repository else ""
    run_url = f"{repository_url}/actions/runs/{run_id}" if repository and run_id else ""

    return {
        "repository": repository,
        "repositoryName": repository_name or repository,
        "owner": owner if repository_name else "",
        "refName": ref_name,
        # On pull requests GITHUB_REF_NAME is "<n>/merge"; the head ref is the real branch.
        "branchName": head_ref or ref_name,
        "headRef": head_ref,
        "baseRef": env("GITHUB_BASE_REF"),
        "sha": sha,
        "shortSha": sha[:7],
        "actor": env("GITHUB_ACTOR"),
        "workflow": env("GITHUB_WORKFLOW"),
        "job": env("GITHUB_JOB"),
        "runId": run_id,
        "runNumber": env("GITHUB_RUN_NUMBER"),
        "runAttempt": env("GITHUB_RUN_ATTEMPT"),
        "eventName": env("GITHUB_EVENT_NAME"),
        "jobStatus": env("JOB_STATUS"),
        "serverUrl": server_url,
        "repositoryUrl": repository_url,
        "runUrl": run_url,
        "workflowUrl": run_url,
        "commitUrl": f"{repository_url}/commit/{sha}" if repository and sha else "",
    }
