"""
Error types raised by the changelog pipeline.
"""
from typing import Any, Optional


class ChangelogError(Exception):
    """Base class for errors that abort a changelog run."""


class ConfigurationError(ChangelogError):
    """
    Raised when the run cannot be configured: missing auth token, a repository that cannot be inferred,
    or a next version that was requested from metadata but is not there.
    """


class RemoteCallError(ChangelogError):
    """
    Raised for any non-success response from the issue tracker.

    Parameters:
        status (int): HTTP status code of the failed call.
        body (Any): raw response body, parsed JSON when available.
        reason (str): short description of the failed request.
    """

    def __init__(self, status: int, body: Any, reason: Optional[str] = None):
        self.status = status
        self.body = body
        self.reason = reason or "Request failed"
        super().__init__(f"{self.reason} (HTTP {status}).\n{body}")


class GitError(ChangelogError):
    """Raised when a git command needed to list the commit range fails."""
