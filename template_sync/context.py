"""Execution context for a single sync run.

Everything the run needs to know about where it was triggered from is
collected once into an immutable :class:`RunContext` and handed to the
orchestrator, instead of being read from the environment along the way.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ContextError, InvalidRepoReference
from .repo import Repo

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".github/file-sync.yml"
DEFAULT_SERVER_URL = "https://github.com"


@dataclass(frozen=True)
class RunContext:
    """Immutable description of the triggering repository and run settings."""

    repo: Repo
    sha: str
    run_id: str
    html_url: str
    server_url: str = DEFAULT_SERVER_URL
    config_file: str = DEFAULT_CONFIG_FILE
    dry_run: bool = False
    fail_fast: bool = False

    @property
    def short_sha(self) -> str:
        return self.sha[:12]

    @property
    def run_url(self) -> str:
        return f"{self.html_url}/actions/runs/{self.run_id}"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_file: str = DEFAULT_CONFIG_FILE,
        dry_run: bool = False,
        fail_fast: bool = False,
    ) -> RunContext:
        """Build a context from GitHub Actions environment variables.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            config_file: Path of the sync configuration in the source repository
            dry_run: Skip pull request creation if True
            fail_fast: Abort the whole run on the first group failure if True

        Returns:
            Populated run context

        Raises:
            ContextError: If GITHUB_REPOSITORY or GITHUB_SHA is missing or invalid
        """
        env = os.environ if environ is None else environ

        repository = env.get("GITHUB_REPOSITORY", "")
        if "/" not in repository:
            raise ContextError(
                "GITHUB_REPOSITORY environment variable must be set to 'owner/repo'"
            )
        try:
            repo = Repo.parse(repository, default_owner="")
        except InvalidRepoReference as e:
            raise ContextError(f"Invalid GITHUB_REPOSITORY: {e}") from e

        sha = env.get("GITHUB_SHA", "")
        if not sha:
            raise ContextError("GITHUB_SHA environment variable not set")

        server_url = env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL
        html_url = _event_repository_url(env.get("GITHUB_EVENT_PATH"))
        if not html_url:
            html_url = f"{server_url}/{repo.owner}/{repo.repo}"

        return cls(
            repo=repo,
            sha=sha,
            run_id=env.get("GITHUB_RUN_ID", ""),
            html_url=html_url,
            server_url=server_url,
            config_file=config_file,
            dry_run=dry_run,
            fail_fast=fail_fast,
        )


def _event_repository_url(event_path: Optional[str]) -> Optional[str]:
    """Read ``repository.html_url`` from the triggering event payload, if any."""
    if not event_path:
        return None

    path = Path(event_path)
    if not path.is_file():
        logger.debug(f"Event payload not found: {event_path}")
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read event payload {event_path}: {e}")
        return None

    repository = payload.get("repository") if isinstance(payload, dict) else None
    if isinstance(repository, dict):
        return repository.get("html_url") or None
    return None
