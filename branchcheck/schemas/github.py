"""GitHub REST payload schemas.

Only the fields the tracker reads are declared; everything else in the
API response is ignored.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class WorkflowRun(BaseModel):
    """A single Actions workflow run."""

    id: int = Field(description="Run ID")
    html_url: str = Field(default="", description="Browser URL of the run")
    status: str = Field(default="", description="queued, in_progress or completed")
    conclusion: str | None = Field(
        default=None,
        description="Raw conclusion (None until the run completes)",
    )
    created_at: datetime = Field(description="When the run was created")


class IssueComment(BaseModel):
    """A comment on an issue or pull request."""

    id: int = Field(description="Comment ID")
    body: str = Field(default="", description="Markdown body")
    updated_at: str = Field(
        default="",
        description="Last modification stamp, used as a revision token",
    )

    @field_validator("body", mode="before")
    @classmethod
    def _none_body(cls, value: object) -> object:
        return "" if value is None else value
