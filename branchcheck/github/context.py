"""GitHub Actions runtime context.

Reads the repository, workflow identity and pull request number from the
environment variables and event payload the Actions runner provides.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from branchcheck.exceptions import ConfigError, NotAPullRequestError

logger = logging.getLogger(__name__)


class EventContext(BaseModel):
    """Identity of the pull request and workflow being checked."""

    repository: str = Field(default="", description="owner/repo slug")
    pr_number: int = Field(default=0, description="Pull request number")
    workflow_name: str = Field(default="", description="Name of the running workflow")
    workflow_ref: str = Field(default="", description="Full reference of the running workflow")


def load_event_context(environ: Mapping[str, str]) -> EventContext:
    """Build the event context from an Actions environment.

    Raises:
        ConfigError: If the event payload cannot be read.
        NotAPullRequestError: If the event carries no pull request.
    """
    event_path = environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise ConfigError("GITHUB_EVENT_PATH is not set; not running inside GitHub Actions?")

    try:
        event = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read event payload {event_path}: {e}") from e

    pull_request = event.get("pull_request") if isinstance(event, dict) else None
    if not pull_request:
        raise NotAPullRequestError()

    context = EventContext(
        repository=environ.get("GITHUB_REPOSITORY", ""),
        pr_number=int(pull_request.get("number", 0)),
        workflow_name=environ.get("GITHUB_WORKFLOW", ""),
        workflow_ref=environ.get("GITHUB_WORKFLOW_REF", ""),
    )
    logger.info(
        "repository: %s, pr: %d, workflow: %s",
        context.repository, context.pr_number, context.workflow_name,
    )
    return context
