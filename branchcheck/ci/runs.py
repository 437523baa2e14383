"""Run-history selection."""

from __future__ import annotations

from branchcheck.schemas.github import WorkflowRun
from branchcheck.schemas.report import Conclusion, PipelineObservation


def select_latest_run(runs: list[WorkflowRun]) -> WorkflowRun | None:
    """Return the most recently created completed run, or None."""
    completed = [r for r in runs if r.status == "completed" and r.conclusion]
    if not completed:
        return None
    return max(completed, key=lambda r: r.created_at)


def observation_from_run(run: WorkflowRun, workflow_name: str) -> PipelineObservation:
    return PipelineObservation(
        name=workflow_name,
        url=run.html_url,
        conclusion=Conclusion.from_github(run.conclusion),
    )
