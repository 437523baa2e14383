"""Main-branch status tracking for pull requests.

Provides the override directive parser, the status comment parser and
renderer, the reconciliation engine, and the write-action and outcome
decisions, wired together by ``evaluate`` and ``run_check``.
"""

from branchcheck.ci.actions import decide_outcome, no_runs_outcome, resolve_action
from branchcheck.ci.overrides import parse_override_flags
from branchcheck.ci.reconcile import reconcile
from branchcheck.ci.report import parse_report, render_report
from branchcheck.ci.runs import observation_from_run, select_latest_run
from branchcheck.ci.tracker import TrackerResult, evaluate, run_check

__all__ = [
    "TrackerResult",
    "decide_outcome",
    "evaluate",
    "no_runs_outcome",
    "observation_from_run",
    "parse_override_flags",
    "parse_report",
    "reconcile",
    "render_report",
    "resolve_action",
    "run_check",
    "select_latest_run",
]
