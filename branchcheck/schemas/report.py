"""Status report schemas.

Defines the pipeline observation, override flags, the structured report
(preamble lines plus pipeline entries), and the write action and outcome
values produced by the reconciliation engine.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Raw GitHub run conclusions that count as a healthy pipeline
_SUCCESS_CONCLUSIONS = {"success", "neutral", "skipped"}


class Conclusion(StrEnum):
    """Observed outcome of a pipeline run."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_github(cls, value: str | None) -> Conclusion:
        """Map a raw GitHub run conclusion onto success or failure.

        Anything that is not explicitly healthy (cancelled, timed_out,
        action_required, unknown values, ...) counts as a failure.
        """
        if value and value.lower() in _SUCCESS_CONCLUSIONS:
            return cls.SUCCESS
        return cls.FAILURE


class EntryLevel(StrEnum):
    """Display level of a failing pipeline in the report."""

    WARNING = "warning"
    FAILURE = "failure"


class PipelineObservation(BaseModel):
    """The latest observed outcome of one tracked pipeline."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Workflow name, the identity key in the report")
    url: str = Field(description="Link to the observed run")
    conclusion: Conclusion = Field(description="Run conclusion")


# ── Override flags ────────────────────────────────────────────────


class OverrideKind(StrEnum):
    """Scope of an override directive."""

    ALL = "all"
    NAMED = "named"


class OverrideFlag(BaseModel):
    """A single override directive extracted from pull request text."""

    model_config = ConfigDict(frozen=True)

    kind: OverrideKind = Field(description="Whether the flag covers all pipelines")
    name: str = Field(default="", description="Pipeline name for named flags")

    @classmethod
    def all(cls) -> OverrideFlag:
        return cls(kind=OverrideKind.ALL)

    @classmethod
    def named(cls, name: str) -> OverrideFlag:
        return cls(kind=OverrideKind.NAMED, name=name)

    def covers(self, pipeline_name: str) -> bool:
        if self.kind == OverrideKind.ALL:
            return True
        return self.name == pipeline_name


class OverrideResult(BaseModel):
    """Override flags plus non-fatal diagnostics from parsing."""

    model_config = ConfigDict(frozen=True)

    flags: frozenset[OverrideFlag] = Field(
        default_factory=frozenset,
        description="Distinct override flags found in the text",
    )
    diagnostics: tuple[str, ...] = Field(
        default=(),
        description="Messages about directives that were ignored",
    )

    def covers(self, pipeline_name: str) -> bool:
        """Return True if any flag overrides the given pipeline."""
        return any(flag.covers(pipeline_name) for flag in self.flags)


# ── Report ────────────────────────────────────────────────────────


class PipelineEntry(BaseModel):
    """A failing pipeline listed in the report."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Pipeline name (identity key)")
    url: str = Field(description="Link to the failing run")
    level: EntryLevel = Field(description="warning when overridden, failure otherwise")

    @property
    def line(self) -> str:
        return f"- [{self.name}]({self.url}): {self.level}"


class Report(BaseModel):
    """Structured view of the persisted status comment.

    Entries keep the order in which pipelines were first observed.
    No two entries share a name.
    """

    model_config = ConfigDict(frozen=True)

    preamble_lines: tuple[str, ...] = Field(
        default=(),
        description="Header, intro and any free text preserved from a prior report",
    )
    entries: tuple[PipelineEntry, ...] = Field(
        default=(),
        description="Failing pipelines, in first-observed order",
    )
    exists: bool = Field(
        default=False,
        description="Whether a persisted report was found",
    )
    comment_id: int | None = Field(
        default=None,
        description="ID of the persisted comment, when it exists",
    )
    revision: str | None = Field(
        default=None,
        description="updated_at stamp of the persisted comment when it was read",
    )

    def find_entry(self, name: str) -> PipelineEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def with_entry_upserted(self, entry: PipelineEntry) -> Report:
        """Return a copy with ``entry`` replacing the same-named entry in
        place, or appended when no entry has that name."""
        entries = list(self.entries)
        for index, existing in enumerate(entries):
            if existing.name == entry.name:
                entries[index] = entry
                break
        else:
            entries.append(entry)
        return self.model_copy(update={"entries": tuple(entries)})

    def with_entry_removed(self, name: str) -> Report:
        """Return a copy without the entry called ``name``."""
        entries = tuple(e for e in self.entries if e.name != name)
        return self.model_copy(update={"entries": entries})


# ── Decisions ─────────────────────────────────────────────────────


class ActionKind(StrEnum):
    """Write operation to perform against the status comment."""

    NOOP = "noop"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Action(BaseModel):
    """A single write command for the comment resource."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    body: str = Field(default="", description="Comment body for create/update")
    comment_id: int | None = Field(default=None, description="Target comment for update/delete")
    revision: str | None = Field(
        default=None,
        description="updated_at stamp the target comment must still carry",
    )

    @classmethod
    def noop(cls) -> Action:
        return cls(kind=ActionKind.NOOP)

    @classmethod
    def create(cls, body: str) -> Action:
        return cls(kind=ActionKind.CREATE, body=body)

    @classmethod
    def update(cls, comment_id: int | None, body: str, revision: str | None = None) -> Action:
        return cls(kind=ActionKind.UPDATE, comment_id=comment_id, body=body, revision=revision)

    @classmethod
    def delete(cls, comment_id: int | None, revision: str | None = None) -> Action:
        return cls(kind=ActionKind.DELETE, comment_id=comment_id, revision=revision)


class OutcomeReason(StrEnum):
    """Why the invoking job passed or failed."""

    SUCCESS = "success"
    OVERRIDDEN = "overridden"
    FAILING = "failing"
    NO_RUNS_FOUND = "no_runs_found"


class Outcome(BaseModel):
    """Pass/fail signal for the invoking job."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    reason: OutcomeReason
    message: str = Field(default="", description="Human-readable explanation")
