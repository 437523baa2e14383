"""Merge one pipeline observation into the status report."""

from __future__ import annotations

import logging

from branchcheck.schemas.report import (
    Conclusion,
    EntryLevel,
    PipelineEntry,
    PipelineObservation,
    Report,
)

logger = logging.getLogger(__name__)


def reconcile(report: Report, observation: PipelineObservation, overridden: bool) -> Report:
    """Return a new report reflecting the observed pipeline.

    A failing pipeline is added (or updated in place) at ``warning`` level
    when overridden and ``failure`` level otherwise. A succeeding pipeline
    is removed. Preamble lines and other entries are left untouched.
    """
    existing = report.find_entry(observation.name)

    if observation.conclusion == Conclusion.FAILURE:
        level = EntryLevel.WARNING if overridden else EntryLevel.FAILURE
        entry = PipelineEntry(name=observation.name, url=observation.url, level=level)
        if existing is not None:
            logger.info("Updating workflow in comment")
        else:
            logger.info("Adding new workflow to comment")
        return report.with_entry_upserted(entry)

    if existing is not None:
        logger.info("Removing successful workflow from comment")
        return report.with_entry_removed(observation.name)

    return report
