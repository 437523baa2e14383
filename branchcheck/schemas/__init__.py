"""branchcheck schema definitions.

All Pydantic v2 models used by the reconciliation engine, the GitHub
client, and configuration loading.
"""

from branchcheck.schemas.config import CheckConfig
from branchcheck.schemas.github import IssueComment, WorkflowRun
from branchcheck.schemas.report import (
    Action,
    ActionKind,
    Conclusion,
    EntryLevel,
    Outcome,
    OutcomeReason,
    OverrideFlag,
    OverrideKind,
    OverrideResult,
    PipelineEntry,
    PipelineObservation,
    Report,
)

__all__ = [
    "Action",
    "ActionKind",
    "CheckConfig",
    "Conclusion",
    "EntryLevel",
    "IssueComment",
    "Outcome",
    "OutcomeReason",
    "OverrideFlag",
    "OverrideKind",
    "OverrideResult",
    "PipelineEntry",
    "PipelineObservation",
    "Report",
    "WorkflowRun",
]
