"""Minimal GitHub REST client for the status tracker.

Uses only urllib from the standard library. Covers the handful of
endpoints the tracker needs: workflow runs, the pull request body, and
issue comment CRUD.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from pydantic import BaseModel, ValidationError

from branchcheck.exceptions import BranchCheckError, GitHubAPIError, StaleReportError
from branchcheck.schemas.config import CheckConfig
from branchcheck.schemas.github import IssueComment, WorkflowRun
from branchcheck.schemas.report import Action, ActionKind

logger = logging.getLogger(__name__)

_API_VERSION = "2022-11-28"
_USER_AGENT = "branchcheck"

# GitHub caps per_page at 100
_PAGE_SIZE = 100


def _parse(model: type[BaseModel], data: Any, path: str) -> Any:
    """Validate a response payload, reporting a malformed one as an API error."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise GitHubAPIError(
            f"Malformed {model.__name__} payload from {path}: {e.error_count()} validation error(s)",
        ) from e


class GitHubClient:
    """Blocking GitHub REST client bound to one repository.

    Usage:
        client = GitHubClient.from_config(config)
        runs = client.list_completed_runs("ci.yml", "main")
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
    ) -> None:
        self._token = token
        self._owner = owner
        self._repo = repo
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: CheckConfig) -> GitHubClient:
        return cls(
            token=config.github_token,
            owner=config.owner,
            repo=config.repo,
            api_url=config.api_url,
            timeout=config.request_timeout,
        )

    # ── Transport ──────────────────────────────────────────────────

    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self._api_url}/repos/{self._owner}/{self._repo}/{path.lstrip('/')}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        return url

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None if empty)."""
        url = self._url(path, params)
        data = json.dumps(payload).encode("utf-8") if payload is not None else None

        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("X-GitHub-Api-Version", _API_VERSION)
        req.add_header("User-Agent", _USER_AGENT)
        if self._token:
            req.add_header("Authorization", f"Bearer {self._token}")
        if data is not None:
            req.add_header("Content-Type", "application/json")

        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:  # noqa: S310
                raw = resp.read()
        except urllib.error.HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace") if e.fp else ""
            raise GitHubAPIError(
                f"{method} {url} failed with HTTP {e.code}: {detail or e.reason}",
                status=e.code,
                url=url,
            ) from e
        except (urllib.error.URLError, OSError, TimeoutError) as e:
            raise GitHubAPIError(f"{method} {url} failed: {e}", url=url) from e

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise GitHubAPIError(f"{method} {url} returned invalid JSON", url=url) from e

    # ── Reads ──────────────────────────────────────────────────────

    def list_completed_runs(self, workflow_path: str, branch: str) -> list[WorkflowRun]:
        """List completed runs of a workflow file on a branch."""
        path = f"actions/workflows/{urllib.parse.quote(workflow_path, safe='')}/runs"
        data = self._request("GET", path, params={"branch": branch, "status": "completed"}) or {}
        runs = data.get("workflow_runs", []) if isinstance(data, dict) else None
        if not isinstance(runs, list):
            raise GitHubAPIError(f"Malformed workflow run listing from {path}")
        return [_parse(WorkflowRun, r, path) for r in runs]

    def get_pull_request_body(self, number: int) -> str | None:
        data = self._request("GET", f"pulls/{number}")
        if data is not None and not isinstance(data, dict):
            raise GitHubAPIError(f"Malformed pull request payload from pulls/{number}")
        return (data or {}).get("body")

    def list_issue_comments(self, number: int) -> list[IssueComment]:
        """List every comment on an issue or pull request, following pages."""
        comments: list[IssueComment] = []
        page = 1
        while True:
            path = f"issues/{number}/comments"
            data = self._request(
                "GET", path, params={"per_page": _PAGE_SIZE, "page": page},
            ) or []
            if not isinstance(data, list):
                raise GitHubAPIError(f"Malformed comment listing from {path}")
            comments.extend(_parse(IssueComment, c, path) for c in data)
            if len(data) < _PAGE_SIZE:
                return comments
            page += 1

    def find_status_comment(self, number: int, marker: str) -> IssueComment | None:
        """Return the first comment whose body contains the marker."""
        for comment in self.list_issue_comments(number):
            if marker in comment.body:
                return comment
        return None

    def get_comment(self, comment_id: int) -> IssueComment:
        data = self._request("GET", f"issues/comments/{comment_id}")
        return _parse(IssueComment, data, f"issues/comments/{comment_id}")

    # ── Writes ─────────────────────────────────────────────────────

    def create_comment(self, number: int, body: str) -> IssueComment:
        data = self._request("POST", f"issues/{number}/comments", payload={"body": body})
        return _parse(IssueComment, data, f"issues/{number}/comments")

    def update_comment(self, comment_id: int, body: str) -> IssueComment:
        data = self._request(
            "PATCH", f"issues/comments/{comment_id}", payload={"body": body},
        )
        return _parse(IssueComment, data, f"issues/comments/{comment_id}")

    def delete_comment(self, comment_id: int) -> None:
        self._request("DELETE", f"issues/comments/{comment_id}")

    def apply_action(self, number: int, action: Action) -> None:
        """Execute a write action against the pull request's status comment.

        Update and delete re-read the comment first and raise
        StaleReportError if it changed since the action was computed.
        """
        if action.kind == ActionKind.NOOP:
            logger.info("No existing comment found, and job was successful, nothing to do")
            return

        if action.kind == ActionKind.CREATE:
            logger.info("Creating comment")
            self.create_comment(number, action.body)
            return

        if action.comment_id is None:
            raise BranchCheckError(f"{action.kind} action has no target comment")
        self._check_revision(action.comment_id, action.revision)

        if action.kind == ActionKind.DELETE:
            logger.info("Removing comment, last workflow passing or no workflows listed")
            self.delete_comment(action.comment_id)
        else:
            logger.info("Updating comment with modified workflow list")
            self.update_comment(action.comment_id, action.body)

    def _check_revision(self, comment_id: int, expected: str | None) -> None:
        if expected is None:
            return
        current = self.get_comment(comment_id)
        if current.updated_at != expected:
            logger.warning(
                "Status comment %d changed from %s to %s since it was read",
                comment_id, expected, current.updated_at,
            )
            raise StaleReportError(comment_id, expected, current.updated_at)
