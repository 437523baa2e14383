"""Tests for branchcheck.ci.reconcile — merging observations into the report."""

from __future__ import annotations

import itertools

import pytest

from branchcheck.ci.reconcile import reconcile
from branchcheck.ci.report import parse_report
from branchcheck.schemas.report import (
    Conclusion,
    EntryLevel,
    PipelineEntry,
    PipelineObservation,
    Report,
)

# ── Helpers ──────────────────────────────────────────────────────


def _obs(name: str, conclusion: Conclusion, url: str | None = None) -> PipelineObservation:
    return PipelineObservation(
        name=name,
        url=url or f"https://ci.example/{name}",
        conclusion=conclusion,
    )


def _failing(name: str, url: str | None = None) -> PipelineObservation:
    return _obs(name, Conclusion.FAILURE, url)


def _passing(name: str) -> PipelineObservation:
    return _obs(name, Conclusion.SUCCESS)


@pytest.fixture()
def fresh() -> Report:
    return parse_report(None, "main")


@pytest.fixture()
def two_entries() -> Report:
    return Report(
        preamble_lines=("header", "intro", "note"),
        entries=(
            PipelineEntry(name="build", url="u-build", level=EntryLevel.FAILURE),
            PipelineEntry(name="lint", url="u-lint", level=EntryLevel.WARNING),
        ),
        exists=True,
        comment_id=3,
    )


# ══════════════════════════════════════════════════════════════════
# Failure observations
# ══════════════════════════════════════════════════════════════════


class TestReconcileFailure:
    def test_appends_new_entry(self, fresh):
        report = reconcile(fresh, _failing("build"), overridden=False)
        assert report.entries == (
            PipelineEntry(name="build", url="https://ci.example/build", level=EntryLevel.FAILURE),
        )

    def test_overridden_failure_is_warning(self, fresh):
        report = reconcile(fresh, _failing("build"), overridden=True)
        assert report.entries[0].level == EntryLevel.WARNING

    def test_not_overridden_failure_is_failure(self, fresh):
        report = reconcile(fresh, _failing("build"), overridden=False)
        assert report.entries[0].level == EntryLevel.FAILURE

    def test_replaces_existing_entry_in_place(self, two_entries):
        report = reconcile(two_entries, _failing("build", url="u-new"), overridden=True)
        assert [e.name for e in report.entries] == ["build", "lint"]
        assert report.entries[0].url == "u-new"
        assert report.entries[0].level == EntryLevel.WARNING

    def test_new_pipeline_appended_at_end(self, two_entries):
        report = reconcile(two_entries, _failing("deploy"), overridden=False)
        assert [e.name for e in report.entries] == ["build", "lint", "deploy"]

    def test_preamble_untouched(self, two_entries):
        report = reconcile(two_entries, _failing("deploy"), overridden=False)
        assert report.preamble_lines == two_entries.preamble_lines
        assert report.comment_id == 3
        assert report.exists is True

    def test_input_report_not_mutated(self, two_entries):
        before = two_entries.entries
        reconcile(two_entries, _failing("deploy"), overridden=False)
        reconcile(two_entries, _passing("build"), overridden=False)
        assert two_entries.entries == before


# ══════════════════════════════════════════════════════════════════
# Success observations
# ══════════════════════════════════════════════════════════════════


class TestReconcileSuccess:
    def test_removes_existing_entry(self, two_entries):
        report = reconcile(two_entries, _passing("build"), overridden=False)
        assert [e.name for e in report.entries] == ["lint"]

    def test_removal_ignores_override(self, two_entries):
        report = reconcile(two_entries, _passing("lint"), overridden=True)
        assert [e.name for e in report.entries] == ["build"]

    def test_unknown_pipeline_is_noop(self, two_entries):
        report = reconcile(two_entries, _passing("deploy"), overridden=False)
        assert report == two_entries

    def test_success_on_fresh_report_keeps_it_empty(self, fresh):
        report = reconcile(fresh, _passing("build"), overridden=True)
        assert report.entries == ()
        assert report.exists is False


# ══════════════════════════════════════════════════════════════════
# Properties
# ══════════════════════════════════════════════════════════════════


class TestReconcileProperties:
    def test_failure_then_success_removes_entry(self, fresh):
        report = reconcile(fresh, _failing("build"), overridden=False)
        report = reconcile(report, _passing("build"), overridden=False)
        assert report.find_entry("build") is None

    def test_override_label_then_recovery(self, fresh):
        warned = reconcile(fresh, _failing("build"), overridden=True)
        assert warned.entries[0].level == EntryLevel.WARNING
        failed = reconcile(fresh, _failing("build"), overridden=False)
        assert failed.entries[0].level == EntryLevel.FAILURE
        assert reconcile(warned, _passing("build"), overridden=True).entries == ()
        assert reconcile(failed, _passing("build"), overridden=False).entries == ()

    def test_at_most_one_entry_per_name(self, fresh):
        names = ["build", "lint", "build", "deploy"]
        steps = [
            (name, conclusion, overridden)
            for name in names
            for conclusion in (Conclusion.FAILURE, Conclusion.SUCCESS)
            for overridden in (False, True)
        ]
        # Walk many interleavings of the same step set
        for offset in range(len(steps)):
            report = fresh
            for name, conclusion, overridden in itertools.islice(
                itertools.cycle(steps), offset, offset + len(steps),
            ):
                report = reconcile(report, _obs(name, conclusion), overridden)
                entry_names = [e.name for e in report.entries]
                assert len(entry_names) == len(set(entry_names))
