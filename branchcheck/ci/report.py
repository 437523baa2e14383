"""Status comment parsing and rendering.

A comment body is a list of lines followed by the marker and a trailer.
Lines of the form ``- [<name>](<url>): <level>`` are pipeline entries;
every other line is preamble (header, intro, or free text from a prior
edit) and is carried through untouched.
"""

from __future__ import annotations

import logging
import re

from branchcheck.ci.templates import HEADER, MARKER, intro, trailer
from branchcheck.schemas.report import EntryLevel, PipelineEntry, Report

logger = logging.getLogger(__name__)

# The name may contain brackets; it runs up to the last "](" before the
# fixed "(url): level" suffix.
_ENTRY_RE = re.compile(
    r"^- \[(?P<name>.+)\]\((?P<url>\S*)\): (?P<level>warning|failure)$"
)

_LINE_BREAKS_RE = re.compile(r"\n+")


def parse_entry(line: str) -> PipelineEntry | None:
    """Return the entry a line describes, or None for preamble text."""
    match = _ENTRY_RE.match(line)
    if match is None:
        return None
    return PipelineEntry(
        name=match.group("name"),
        url=match.group("url"),
        level=EntryLevel(match.group("level")),
    )


def parse_report(
    existing_body: str | None,
    main_branch: str,
    *,
    comment_id: int | None = None,
    revision: str | None = None,
) -> Report:
    """Split a persisted comment body into preamble lines and entries.

    Args:
        existing_body: Body of the current status comment, or None when
            no status comment exists yet.
        main_branch: Substituted into the intro of a fresh report.
        comment_id: ID of the persisted comment.
        revision: updated_at stamp of the persisted comment.

    Returns:
        A fresh report (header + intro) when there is no prior body,
        otherwise the parsed report with ``exists=True``.
    """
    if existing_body is None:
        return Report(preamble_lines=(HEADER, intro(main_branch)), exists=False)

    content = existing_body.split(MARKER, 1)[0].replace("\r\n", "\n").strip()
    lines = _LINE_BREAKS_RE.split(content) if content else []

    preamble: list[str] = []
    entries: list[PipelineEntry] = []
    seen: set[str] = set()
    for line in lines:
        entry = parse_entry(line)
        if entry is None:
            preamble.append(line)
        elif entry.name in seen:
            logger.warning("Dropping duplicate entry for workflow %s", entry.name)
        else:
            seen.add(entry.name)
            entries.append(entry)

    return Report(
        preamble_lines=tuple(preamble),
        entries=tuple(entries),
        exists=True,
        comment_id=comment_id,
        revision=revision,
    )


def render_report(report: Report, main_branch: str) -> str:
    """Serialize a report into the final comment body.

    The header and intro (the first two preamble lines) are each followed
    by a blank line; entries come after all preamble lines.
    """
    lines = list(report.preamble_lines)
    for index in range(min(2, len(lines))):
        lines[index] += "\n"
    lines.extend(entry.line for entry in report.entries)

    content = "\n".join(lines).strip()
    return f"{content}\n\n{MARKER}\n{trailer(main_branch)}\n"
