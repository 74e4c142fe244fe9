"""Exception types raised by template-file-sync."""

from __future__ import annotations

from typing import Optional


class TemplateSyncError(Exception):
    """Base class for all template-file-sync errors."""


class InvalidRepoReference(TemplateSyncError, ValueError):
    """A repository string could not be parsed into owner and name."""


class ConfigNotFoundError(TemplateSyncError, FileNotFoundError):
    """The sync configuration file does not exist in the source repository."""


class ConfigParseError(TemplateSyncError, ValueError):
    """The sync configuration could not be decoded into the expected shape."""


class ContextError(TemplateSyncError):
    """Required execution context (GitHub Actions environment) is missing."""


class GitHubAPIError(TemplateSyncError):
    """A GitHub REST API request returned an unexpected status.

    Attributes:
        status: HTTP status code of the response
        message: Error message reported by GitHub
        url: Requested URL
    """

    def __init__(self, status: int, message: str, url: Optional[str] = None):
        self.status = status
        self.message = message
        self.url = url
        super().__init__(f"GitHub API error {status}: {message}" + (f" ({url})" if url else ""))


class ReferenceAlreadyExistsError(GitHubAPIError):
    """The sync branch already exists in the destination repository."""
