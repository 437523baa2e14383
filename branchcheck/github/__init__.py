"""GitHub REST and Actions runtime integration."""

from branchcheck.github.client import GitHubClient
from branchcheck.github.context import EventContext, load_event_context

__all__ = ["EventContext", "GitHubClient", "load_event_context"]
