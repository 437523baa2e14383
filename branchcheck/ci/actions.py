"""Write-action and job-outcome decisions.

Both decisions are computed independently: the comment can list a
pipeline as ``warning`` while the job itself passes because of an
override.
"""

from __future__ import annotations

from branchcheck.schemas.report import (
    Action,
    Conclusion,
    Outcome,
    OutcomeReason,
    PipelineObservation,
    Report,
)


def resolve_action(report: Report, rendered_body: str) -> Action:
    """Decide how the reconciled report is persisted.

    Rules:
    - No prior comment, no entries → noop
    - No prior comment, entries → create
    - Prior comment, no entries → delete
    - Prior comment, entries → update
    """
    if not report.exists:
        if not report.entries:
            return Action.noop()
        return Action.create(rendered_body)

    if not report.entries:
        return Action.delete(report.comment_id, report.revision)
    return Action.update(report.comment_id, rendered_body, report.revision)


def decide_outcome(
    observation: PipelineObservation,
    overridden: bool,
    main_branch: str,
) -> Outcome:
    """Decide whether the invoking job should be reported as failed."""
    if observation.conclusion == Conclusion.SUCCESS:
        return Outcome(
            passed=True,
            reason=OutcomeReason.SUCCESS,
            message=(
                f"Latest run of workflow on {main_branch} branch is successful: "
                f"{observation.url}"
            ),
        )

    failing = f"Latest run of workflow on {main_branch} branch is failing: {observation.url}"
    if overridden:
        return Outcome(
            passed=True,
            reason=OutcomeReason.OVERRIDDEN,
            message=f"{failing}\nOverride flag found, not failing the run.",
        )
    return Outcome(passed=False, reason=OutcomeReason.FAILING, message=failing)


def no_runs_outcome(workflow_path: str, main_branch: str) -> Outcome:
    """Outcome for a workflow with no completed runs on the main branch."""
    return Outcome(
        passed=False,
        reason=OutcomeReason.NO_RUNS_FOUND,
        message=(
            f"No completed runs of workflow {workflow_path} found on the "
            f"{main_branch} branch"
        ),
    )
