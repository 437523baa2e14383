"""Tests for branchcheck.github.client — GitHub REST calls and action execution."""

from __future__ import annotations

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from branchcheck.exceptions import BranchCheckError, GitHubAPIError, StaleReportError
from branchcheck.github.client import GitHubClient
from branchcheck.schemas.config import CheckConfig
from branchcheck.schemas.report import Action

_URLOPEN = "branchcheck.github.client.urllib.request.urlopen"


def _response(payload) -> MagicMock:
    """A urlopen() context manager returning the JSON-encoded payload."""
    resp = MagicMock()
    resp.read.return_value = b"" if payload is None else json.dumps(payload).encode()
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


def _http_error(code: int, body: str = '{"message": "Not Found"}') -> urllib.error.HTTPError:
    return urllib.error.HTTPError(
        "https://api.github.com/x", code, "err", {}, io.BytesIO(body.encode()),
    )


@pytest.fixture()
def client() -> GitHubClient:
    return GitHubClient(token="t0k3n", owner="acme", repo="app")


def _requests(mock_urlopen: MagicMock) -> list:
    return [c.args[0] for c in mock_urlopen.call_args_list]


# ══════════════════════════════════════════════════════════════════
# Transport
# ══════════════════════════════════════════════════════════════════


class TestTransport:
    def test_headers_and_url(self, client):
        with patch(_URLOPEN, return_value=_response({"body": "hi"})) as mock_urlopen:
            client.get_pull_request_body(12)
        req = _requests(mock_urlopen)[0]
        assert req.full_url == "https://api.github.com/repos/acme/app/pulls/12"
        assert req.get_method() == "GET"
        assert req.get_header("Authorization") == "Bearer t0k3n"
        assert req.get_header("Accept") == "application/vnd.github+json"
        assert req.get_header("X-github-api-version") == "2022-11-28"

    def test_http_error_raises_api_error(self, client):
        with patch(_URLOPEN, side_effect=_http_error(404)):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_pull_request_body(12)
        assert exc_info.value.status == 404
        assert "Not Found" in str(exc_info.value)

    def test_url_error_raises_api_error(self, client):
        with patch(_URLOPEN, side_effect=urllib.error.URLError("no route")):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_pull_request_body(12)
        assert exc_info.value.status is None

    def test_invalid_json_raises_api_error(self, client):
        resp = _response(None)
        resp.read.return_value = b"<html>"
        with patch(_URLOPEN, return_value=resp):
            with pytest.raises(GitHubAPIError):
                client.get_pull_request_body(12)

    def test_malformed_comment_raises_api_error(self, client):
        with patch(_URLOPEN, return_value=_response([{"body": "no id"}])):
            with pytest.raises(GitHubAPIError, match="Malformed IssueComment"):
                client.list_issue_comments(12)

    def test_malformed_run_raises_api_error(self, client):
        payload = {"workflow_runs": [{"id": "not-a-number", "created_at": "2024-05-01T10:00:00Z"}]}
        with patch(_URLOPEN, return_value=_response(payload)):
            with pytest.raises(GitHubAPIError, match="Malformed WorkflowRun"):
                client.list_completed_runs("ci.yml", "main")

    def test_unexpected_listing_shape_raises_api_error(self, client):
        with patch(_URLOPEN, return_value=_response({"message": "odd"})):
            with pytest.raises(GitHubAPIError, match="comment listing"):
                client.list_issue_comments(12)

    def test_from_config(self):
        config = CheckConfig(
            github_token="abc",
            repository="octo/repo",
            pr_number=1,
            workflow_name="ci",
            workflow_ref="octo/repo/.github/workflows/ci.yml@refs/heads/main",
            api_url="https://ghe.example/api/v3/",
        )
        c = GitHubClient.from_config(config)
        with patch(_URLOPEN, return_value=_response({"body": None})) as mock_urlopen:
            assert c.get_pull_request_body(1) is None
        assert _requests(mock_urlopen)[0].full_url == "https://ghe.example/api/v3/repos/octo/repo/pulls/1"


# ══════════════════════════════════════════════════════════════════
# Reads
# ══════════════════════════════════════════════════════════════════


class TestReads:
    def test_list_completed_runs(self, client):
        payload = {
            "total_count": 2,
            "workflow_runs": [
                {
                    "id": 1, "html_url": "https://x/1", "status": "completed",
                    "conclusion": "failure", "created_at": "2024-05-01T10:00:00Z",
                    "head_branch": "main",
                },
                {
                    "id": 2, "html_url": "https://x/2", "status": "completed",
                    "conclusion": "success", "created_at": "2024-05-02T10:00:00Z",
                },
            ],
        }
        with patch(_URLOPEN, return_value=_response(payload)) as mock_urlopen:
            runs = client.list_completed_runs("ci.yml", "main")
        assert [r.id for r in runs] == [1, 2]
        assert runs[0].conclusion == "failure"
        url = _requests(mock_urlopen)[0].full_url
        assert "/actions/workflows/ci.yml/runs?" in url
        assert "branch=main" in url
        assert "status=completed" in url

    def test_list_comments_follows_pages(self, client):
        page1 = [{"id": i, "body": f"c{i}"} for i in range(100)]
        page2 = [{"id": 100, "body": "last"}]
        with patch(_URLOPEN, side_effect=[_response(page1), _response(page2)]) as mock_urlopen:
            comments = client.list_issue_comments(12)
        assert len(comments) == 101
        urls = [r.full_url for r in _requests(mock_urlopen)]
        assert "page=1" in urls[0]
        assert "page=2" in urls[1]
        assert "per_page=100" in urls[0]

    def test_find_status_comment_returns_first_match(self, client):
        comments = [
            {"id": 1, "body": "LGTM"},
            {"id": 2, "body": "report <!-- m -->", "updated_at": "t2"},
            {"id": 3, "body": "another <!-- m -->"},
        ]
        with patch(_URLOPEN, return_value=_response(comments)):
            found = client.find_status_comment(12, "<!-- m -->")
        assert found is not None
        assert found.id == 2
        assert found.updated_at == "t2"

    def test_find_status_comment_none(self, client):
        with patch(_URLOPEN, return_value=_response([{"id": 1, "body": "LGTM"}])):
            assert client.find_status_comment(12, "<!-- m -->") is None


# ══════════════════════════════════════════════════════════════════
# apply_action
# ══════════════════════════════════════════════════════════════════


class TestApplyAction:
    def test_noop_makes_no_request(self, client):
        with patch(_URLOPEN) as mock_urlopen:
            client.apply_action(12, Action.noop())
        mock_urlopen.assert_not_called()

    def test_create_posts_body(self, client):
        with patch(_URLOPEN, return_value=_response({"id": 5, "body": "b"})) as mock_urlopen:
            client.apply_action(12, Action.create("b"))
        req = _requests(mock_urlopen)[0]
        assert req.get_method() == "POST"
        assert req.full_url.endswith("/issues/12/comments")
        assert json.loads(req.data) == {"body": "b"}

    def test_update_checks_revision_then_patches(self, client):
        current = _response({"id": 5, "body": "old", "updated_at": "r1"})
        patched = _response({"id": 5, "body": "new", "updated_at": "r2"})
        with patch(_URLOPEN, side_effect=[current, patched]) as mock_urlopen:
            client.apply_action(12, Action.update(5, "new", "r1"))
        get_req, patch_req = _requests(mock_urlopen)
        assert get_req.get_method() == "GET"
        assert get_req.full_url.endswith("/issues/comments/5")
        assert patch_req.get_method() == "PATCH"
        assert json.loads(patch_req.data) == {"body": "new"}

    def test_delete_checks_revision_then_deletes(self, client):
        current = _response({"id": 5, "body": "old", "updated_at": "r1"})
        with patch(_URLOPEN, side_effect=[current, _response(None)]) as mock_urlopen:
            client.apply_action(12, Action.delete(5, "r1"))
        assert _requests(mock_urlopen)[1].get_method() == "DELETE"

    def test_stale_revision_refuses_write(self, client):
        current = _response({"id": 5, "body": "edited", "updated_at": "r9"})
        with patch(_URLOPEN, side_effect=[current]) as mock_urlopen:
            with pytest.raises(StaleReportError) as exc_info:
                client.apply_action(12, Action.update(5, "new", "r1"))
        assert mock_urlopen.call_count == 1
        assert exc_info.value.actual == "r9"

    def test_without_revision_writes_directly(self, client):
        with patch(_URLOPEN, return_value=_response(None)) as mock_urlopen:
            client.apply_action(12, Action.delete(5))
        assert mock_urlopen.call_count == 1
        assert _requests(mock_urlopen)[0].get_method() == "DELETE"

    def test_update_without_target_raises(self, client):
        with patch(_URLOPEN) as mock_urlopen:
            with pytest.raises(BranchCheckError):
                client.apply_action(12, Action.update(None, "body"))
        mock_urlopen.assert_not_called()
