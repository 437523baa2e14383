"""Check configuration schema.

A single immutable value carrying everything an invocation needs: GitHub
credentials, pull request and workflow identity, and the main branch
settings. It is threaded explicitly into every component call.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

_WORKFLOWS_SEGMENT = "workflows/"


class CheckConfig(BaseModel):
    """Configuration for one tracker invocation."""

    model_config = ConfigDict(frozen=True)

    github_token: str = Field(default="", repr=False, description="Token for the GitHub API")
    repository: str = Field(description="owner/repo slug")
    pr_number: int = Field(gt=0, description="Pull request number")
    workflow_name: str = Field(description="Name of the tracked workflow")
    workflow_ref: str = Field(
        description="Workflow reference, e.g. owner/repo/.github/workflows/ci.yml@refs/heads/main",
    )
    main_branch: str = Field(default="main", description="Branch whose runs are tracked")
    allow_override_all: bool = Field(
        default=False,
        description="Honor unscoped [ci override_main_branch_checks] directives",
    )
    api_url: str = Field(default="https://api.github.com", description="GitHub REST API base URL")
    request_timeout: float = Field(default=30.0, gt=0.0, description="HTTP timeout in seconds")

    @field_validator("repository")
    @classmethod
    def _check_repository(cls, value: str) -> str:
        owner, sep, repo = value.partition("/")
        if not sep or not owner or not repo:
            raise ValueError(f"repository must be 'owner/repo', got {value!r}")
        return value

    @field_validator("workflow_ref")
    @classmethod
    def _check_workflow_ref(cls, value: str) -> str:
        start = value.find(_WORKFLOWS_SEGMENT)
        if start == -1 or value.find("@", start) == -1:
            raise ValueError(
                f"workflow_ref must look like '.../workflows/<file>@<ref>', got {value!r}"
            )
        return value

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]

    @property
    def workflow_path(self) -> str:
        """Workflow file name between ``workflows/`` and ``@``."""
        start = self.workflow_ref.index(_WORKFLOWS_SEGMENT) + len(_WORKFLOWS_SEGMENT)
        end = self.workflow_ref.index("@", start)
        return self.workflow_ref[start:end]
