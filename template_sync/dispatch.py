"""Open sync pull requests in destination repositories.

Every sync pull request is pushed to the same branch name, so re-running a
sync against a repository that still has the previous pull request open
resolves to "already exists" (or "no changes") instead of a duplicate.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .changes import ChangeSet
from .context import RunContext
from .exceptions import ReferenceAlreadyExistsError
from .github import PullRequestOptions, PullRequestProvider
from .repo import Repo

logger = logging.getLogger(__name__)

SYNC_BRANCH = "automagically-template-syncs"


class OutcomeKind(enum.Enum):
    CREATED = "created"
    NO_CHANGES = "no_changes"
    ALREADY_EXISTS = "already_exists"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class PullRequestOutcome:
    """Result of dispatching a change-set to one destination."""

    kind: OutcomeKind
    number: Optional[int] = None
    url: Optional[str] = None

    @classmethod
    def created(cls, number: int, url: str) -> PullRequestOutcome:
        return cls(OutcomeKind.CREATED, number, url)

    @classmethod
    def no_changes(cls) -> PullRequestOutcome:
        return cls(OutcomeKind.NO_CHANGES)

    @classmethod
    def already_exists(cls) -> PullRequestOutcome:
        return cls(OutcomeKind.ALREADY_EXISTS)

    @classmethod
    def dry_run(cls) -> PullRequestOutcome:
        return cls(OutcomeKind.DRY_RUN)

    def __str__(self) -> str:
        if self.kind is OutcomeKind.CREATED:
            return f"created #{self.number} {self.url}"
        return self.kind.value.replace("_", " ")


class PullRequestDispatcher:
    """Submits change-sets as pull requests on the fixed sync branch."""

    def __init__(self, provider: PullRequestProvider, context: RunContext):
        self.provider = provider
        self.context = context

    def build_options(self, dest: Repo, change_set: ChangeSet) -> PullRequestOptions:
        source = self.context.repo.to_str()
        html_url = self.context.html_url
        return {
            "owner": dest.owner,
            "repo": dest.repo,
            "title": f"🔃 Synced files from {source}",
            "body": (
                f"🔃 Synced files from [{source}]({html_url})\n\n"
                f"This PR was created automatically by workflow run "
                f"[#{self.context.run_id}]({self.context.run_url})"
            ),
            "head": SYNC_BRANCH,
            "changes": [change_set.to_payload()],
        }

    def dispatch(self, dest: Repo, change_set: ChangeSet) -> PullRequestOutcome:
        """Create the sync pull request for one destination.

        Returns:
            The outcome; "already exists" and "no changes" are not errors

        Raises:
            GitHubAPIError: For any provider failure other than an existing branch
        """
        logger.info(f"Creating pull request for {dest}")

        if self.context.dry_run:
            logger.info(f"✓ {dest}: no pull request was created due to dry run")
            return PullRequestOutcome.dry_run()

        options = self.build_options(dest, change_set)
        try:
            pr = self.provider.create_pull_request(options)
        except ReferenceAlreadyExistsError:
            logger.info(f"✓ {dest}: pull request already exists on {SYNC_BRANCH}")
            return PullRequestOutcome.already_exists()

        if pr is None:
            logger.info(f"✓ {dest}: no pull request was created since there were no changes")
            return PullRequestOutcome.no_changes()

        logger.info(f"✓ {dest}: pull request created: #{pr['number']} {pr['html_url']}")
        return PullRequestOutcome.created(pr["number"], pr["html_url"])
