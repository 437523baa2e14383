"""Fixed text of the status comment.

The marker identifies the comment among all comments on a pull request,
so it must never change.
"""

from __future__ import annotations

OVERRIDE_TAG = "override_main_branch_checks"
MARKER = "<!-- unique_identifier: action_comment_marker -->"
HEADER = "**Workflow Status Tracker**"


def intro(main_branch: str) -> str:
    return (
        f"The following workflows are failing on {main_branch}. "
        "You can make specific workflows not fail by adding "
        f"[ci {OVERRIDE_TAG} $workflow] to your PR description "
        f"or bypass all by adding [ci {OVERRIDE_TAG}]."
    )


def trailer(main_branch: str) -> str:
    return (
        "This comment created by the main-branch-check action. "
        "It will be removed when no workflows are red on the "
        f"{main_branch} branch."
    )
