"""File synchronization logic for template-file-sync.

This module orchestrates a sync run: load the configuration from the source
repository, fetch each sync group's files once, and open a pull request in
every destination repository listed for the group.
"""

from __future__ import annotations

import logging

import requests

from .changes import build_change_set
from .config import SyncConfig, SyncGroup, load_config
from .context import RunContext
from .dispatch import OutcomeKind, PullRequestDispatcher, PullRequestOutcome
from .exceptions import GitHubAPIError, InvalidRepoReference
from .fetch import fetch_files
from .github import GitHubClient
from .repo import Repo

logger = logging.getLogger(__name__)


class SyncResult:
    """Result of a sync run.

    Contains the outcome for every destination that was dispatched and the
    error for every sync group that failed.
    """

    def __init__(self):
        """Initialize empty sync result."""
        self.outcomes: list[tuple[Repo, PullRequestOutcome]] = []
        self.failures: list[tuple[str, Exception]] = []

    def add_outcome(self, dest: Repo, outcome: PullRequestOutcome) -> None:
        self.outcomes.append((dest, outcome))

    def add_failure(self, label: str, error: Exception) -> None:
        """Record a failed sync group.

        Args:
            label: Human readable identifier of the sync group
            error: Exception that aborted the group
        """
        self.failures.append((label, error))

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for _, outcome in self.outcomes if outcome.kind is kind)

    @property
    def created(self) -> list[PullRequestOutcome]:
        """Outcomes of pull requests created during the run."""
        return [o for _, o in self.outcomes if o.kind is OutcomeKind.CREATED]

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def is_success(self) -> bool:
        """True if no sync group failed."""
        return self.failure_count == 0

    def __str__(self) -> str:
        """String representation of sync results."""
        return (
            f"Sync completed: {self.count(OutcomeKind.CREATED)} created, "
            f"{self.count(OutcomeKind.NO_CHANGES)} unchanged, "
            f"{self.count(OutcomeKind.ALREADY_EXISTS)} already open, "
            f"{self.count(OutcomeKind.DRY_RUN)} dry run, "
            f"{self.failure_count} failed"
        )


class FileSync:
    """Main synchronization orchestrator.

    Sync groups, file fetches and destination dispatches are processed one at
    a time in configuration order.
    """

    def __init__(self, client: GitHubClient, context: RunContext):
        """Initialize the synchronizer.

        Args:
            client: Content and pull request provider
            context: Source repository and run settings
        """
        self.client = client
        self.context = context
        self.dispatcher = PullRequestDispatcher(client, context)

    def load_config(self) -> SyncConfig:
        return load_config(
            self.client, self.context.repo, self.context.config_file, self.context.sha
        )

    def run(self) -> SyncResult:
        """Run the sync.

        A failing sync group stops dispatching to its remaining destinations.
        Unless ``fail_fast`` is set, the run then continues with the next group
        and the failure is reported in the result.

        Returns:
            Outcomes and failures of the run

        Raises:
            ConfigNotFoundError: If the configuration file is missing
            ConfigParseError: If the configuration is invalid
            GitHubAPIError: On a group failure when ``fail_fast`` is set
        """
        logger.info(f"Running file sync from {self.context.repo} @ {self.context.short_sha}")
        if self.context.dry_run:
            logger.info("DRY RUN MODE - No pull requests will be created")

        config = self.load_config()
        result = SyncResult()

        for index, group in enumerate(config["syncs"]):
            try:
                self._sync_group(index, group, result)
            except (GitHubAPIError, InvalidRepoReference, requests.RequestException) as e:
                if self.context.fail_fast:
                    raise
                label = f"sync {index}"
                logger.error(f"✗ Failed {label}: {e}")
                result.add_failure(label, e)

        logger.info(str(result))
        return result

    def _sync_group(self, index: int, group: SyncGroup, result: SyncResult) -> None:
        logger.info(
            f"Processing sync {index}: {len(group['files'])} files -> "
            f"{len(group['repos'])} repositories"
        )
        logger.info(f"Fetching files from {self.context.repo}")
        files = fetch_files(
            self.client, self.context.repo, self.context.sha, group["files"]
        )
        change_set = build_change_set(files)

        for remote in group["repos"]:
            dest = Repo.parse(remote, default_owner=self.context.repo.owner)
            outcome = self.dispatcher.dispatch(dest, change_set)
            result.add_outcome(dest, outcome)
