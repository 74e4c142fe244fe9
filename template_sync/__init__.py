"""Template File Sync - propagate files from one repository to many.

This package reads a sync configuration from the source repository and opens
pull requests that copy the configured files into each destination repository.
"""

from .changes import ChangeSet, FileChange, build_change_set
from .config import FileRef, SyncConfig, SyncGroup, load_config
from .context import RunContext
from .dispatch import SYNC_BRANCH, OutcomeKind, PullRequestDispatcher, PullRequestOutcome
from .github import GitHubClient
from .repo import Repo
from .sync import FileSync, SyncResult

__version__ = "1.0.0"

__all__ = [
    "ChangeSet",
    "FileChange",
    "build_change_set",
    "FileRef",
    "SyncConfig",
    "SyncGroup",
    "load_config",
    "RunContext",
    "SYNC_BRANCH",
    "OutcomeKind",
    "PullRequestDispatcher",
    "PullRequestOutcome",
    "GitHubClient",
    "Repo",
    "FileSync",
    "SyncResult",
]
