"""Override directive parsing.

Pull request authors can exempt failing main-branch workflows by adding
``[ci override_main_branch_checks <workflow>]`` to the PR description, or
all of them with ``[ci override_main_branch_checks]``.
"""

from __future__ import annotations

import logging
import re

from branchcheck.ci.templates import OVERRIDE_TAG
from branchcheck.schemas.report import OverrideFlag, OverrideResult

logger = logging.getLogger(__name__)

# The scope stops at the first unbalanced closing bracket on the same line,
# so "CI [nightly]" is one scope and two directives on one line are two
# matches.
_DIRECTIVE_RE = re.compile(
    r"\[ci " + re.escape(OVERRIDE_TAG)
    + r"(?:[ \t]+(?P<scope>(?:[^\[\]\n]|\[[^\[\]\n]*\])*))?\]",
    re.IGNORECASE,
)

_SCOPE_ALL_DISALLOWED = (
    "Override flag was set for all workflows, but action configured to not "
    "allow that. Please specify workflows to override."
)


def parse_override_flags(text: str | None, allow_scope_all: bool) -> OverrideResult:
    """Extract override flags from free text.

    Args:
        text: PR description (None when the PR has no body).
        allow_scope_all: Whether an unscoped directive is honored.

    Returns:
        OverrideResult with the distinct flags and any diagnostics.
    """
    if text is None:
        return OverrideResult()

    flags: set[OverrideFlag] = set()
    diagnostics: list[str] = []

    for match in _DIRECTIVE_RE.finditer(text):
        scope = match.group("scope") or ""
        if scope:
            flags.add(OverrideFlag.named(scope))
        elif allow_scope_all:
            flags.add(OverrideFlag.all())
        else:
            logger.warning(_SCOPE_ALL_DISALLOWED)
            diagnostics.append(_SCOPE_ALL_DISALLOWED)

    return OverrideResult(flags=frozenset(flags), diagnostics=tuple(diagnostics))
