"""branchcheck — main-branch workflow status tracker for pull requests."""

__version__ = "0.1.0"
