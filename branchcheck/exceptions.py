class BranchCheckError(Exception):
    """Base exception for all application-specific errors."""


class ConfigError(BranchCheckError):
    """Raised when required configuration is missing or invalid."""


class NotAPullRequestError(ConfigError):
    """Raised when the triggering event carries no pull request."""

    def __init__(self) -> None:
        super().__init__("This action must be triggered by a pull request")


class GitHubAPIError(BranchCheckError):
    """Raised when a GitHub REST call fails at the transport or HTTP level."""

    def __init__(self, message: str, *, status: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class StaleReportError(BranchCheckError):
    """Raised when the status comment changed after it was read."""

    def __init__(self, comment_id: int, expected: str | None, actual: str) -> None:
        super().__init__(
            f"Status comment {comment_id} was modified concurrently "
            f"(read at {expected!r}, now {actual!r}); refusing to overwrite"
        )
        self.comment_id = comment_id
        self.expected = expected
        self.actual = actual
