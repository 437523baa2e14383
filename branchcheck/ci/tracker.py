"""Status tracker: read, reconcile, write.

``evaluate`` is the pure core: given the observed run, the current status
comment and the PR description it returns the write action and the job
outcome. ``run_check`` wraps it with the GitHub reads and the single
write.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, Field

from branchcheck.ci.actions import decide_outcome, no_runs_outcome, resolve_action
from branchcheck.ci.overrides import parse_override_flags
from branchcheck.ci.reconcile import reconcile
from branchcheck.ci.report import parse_report, render_report
from branchcheck.ci.runs import observation_from_run, select_latest_run
from branchcheck.ci.templates import MARKER
from branchcheck.schemas.config import CheckConfig
from branchcheck.schemas.github import IssueComment, WorkflowRun
from branchcheck.schemas.report import (
    Action,
    Outcome,
    OverrideResult,
    PipelineObservation,
    Report,
)

logger = logging.getLogger(__name__)


class TrackerClient(Protocol):
    """The GitHub operations run_check depends on."""

    def list_completed_runs(self, workflow_path: str, branch: str) -> list[WorkflowRun]: ...

    def find_status_comment(self, number: int, marker: str) -> IssueComment | None: ...

    def get_pull_request_body(self, number: int) -> str | None: ...

    def apply_action(self, number: int, action: Action) -> None: ...


class TrackerResult(BaseModel):
    """Everything one invocation decided."""

    action: Action
    outcome: Outcome
    observation: PipelineObservation | None = Field(
        default=None, description="None when no completed run was found",
    )
    report: Report | None = Field(default=None, description="Reconciled report")
    body: str = Field(default="", description="Rendered comment body")
    overrides: OverrideResult = Field(default_factory=OverrideResult)

    @property
    def overridden(self) -> bool:
        if self.observation is None:
            return False
        return self.overrides.covers(self.observation.name)


def evaluate(
    config: CheckConfig,
    observation: PipelineObservation,
    existing_comment: IssueComment | None,
    pr_body: str | None,
) -> TrackerResult:
    """Reconcile one observation against the current status comment.

    Args:
        config: Invocation configuration.
        observation: Latest outcome of the tracked workflow.
        existing_comment: Current status comment, or None if there is none.
        pr_body: Pull request description to scan for override directives.

    Returns:
        TrackerResult with the write action and the job outcome.
    """
    overrides = parse_override_flags(pr_body, config.allow_override_all)
    overridden = overrides.covers(observation.name)

    if existing_comment is not None:
        report = parse_report(
            existing_comment.body,
            config.main_branch,
            comment_id=existing_comment.id,
            revision=existing_comment.updated_at or None,
        )
    else:
        report = parse_report(None, config.main_branch)

    reconciled = reconcile(report, observation, overridden)
    body = render_report(reconciled, config.main_branch)

    return TrackerResult(
        action=resolve_action(reconciled, body),
        outcome=decide_outcome(observation, overridden, config.main_branch),
        observation=observation,
        report=reconciled,
        body=body,
        overrides=overrides,
    )


def run_check(config: CheckConfig, client: TrackerClient) -> TrackerResult:
    """Run one full read-reconcile-write cycle against GitHub.

    When the workflow has no completed runs on the main branch, the status
    comment is left untouched and a failing ``no_runs_found`` outcome is
    returned.
    """
    logger.info("Gathering workflow runs for %s...", config.workflow_path)
    runs = client.list_completed_runs(config.workflow_path, config.main_branch)
    latest = select_latest_run(runs)
    if latest is None:
        outcome = no_runs_outcome(config.workflow_path, config.main_branch)
        logger.warning(outcome.message)
        return TrackerResult(action=Action.noop(), outcome=outcome)

    observation = observation_from_run(latest, config.workflow_name)

    logger.info("Gathering PR description...")
    pr_body = client.get_pull_request_body(config.pr_number)
    existing = client.find_status_comment(config.pr_number, MARKER)

    result = evaluate(config, observation, existing, pr_body)

    logger.info("Creating, updating, or removing comment, as necessary")
    client.apply_action(config.pr_number, result.action)
    return result
