"""GitHub API client for reading source files and opening sync pull requests.

This module provides the repository content provider and the pull request
creation provider used by the sync engine, both backed by the GitHub REST API.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import quote

import requests
from typing_extensions import NotRequired, Protocol, TypedDict

from .exceptions import GitHubAPIError, ReferenceAlreadyExistsError
from .repo import Repo

logger = logging.getLogger(__name__)

FILE_MODE = "100644"
EXECUTABLE_MODE = "100755"


class FilePayload(TypedDict):
    """A single file in a pull request change, keyed by destination path."""

    content: str
    encoding: str
    mode: NotRequired[str]


class CommitChanges(TypedDict):
    """One commit worth of file changes."""

    files: dict[str, FilePayload]
    commit: str
    empty_commit: bool


class PullRequestOptions(TypedDict):
    """Options for creating a pull request with file changes."""

    owner: str
    repo: str
    title: str
    body: str
    head: str
    changes: list[CommitChanges]
    base: NotRequired[str]


class PullRequest(TypedDict):
    """A created pull request."""

    number: int
    html_url: str


class ContentProvider(Protocol):
    """Reads repository contents."""

    def get_content(
        self, repo: Repo, path: str, ref: Optional[str] = None
    ) -> Optional[Any]: ...


class PullRequestProvider(Protocol):
    """Creates pull requests from a set of file changes.

    Returns None when the changes produce no diff against the base branch and
    raises ReferenceAlreadyExistsError when the head branch already exists.
    """

    def create_pull_request(
        self, options: PullRequestOptions
    ) -> Optional[PullRequest]: ...


class GitHubClient:
    """Client for the GitHub REST API.

    Reads file contents from the source repository and creates pull requests in
    destination repositories through the Git Data API (blobs, trees, commits, refs).
    """

    API_URL = "https://api.github.com"

    def __init__(
        self,
        timeout: int = 30,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
    ):
        """Initialize the GitHub client.

        Args:
            timeout: Request timeout in seconds
            token: Optional GitHub token; falls back to GITHUB_TOKEN
            api_url: Optional API base URL for GitHub Enterprise
        """
        self.timeout = timeout
        self.token = token or os.getenv("GITHUB_TOKEN")
        self.api_url = (api_url or self.API_URL).rstrip("/")
        self.session = requests.Session()

        self.session.headers.update(
            {
                "User-Agent": "template-file-sync/1.0.0",
                "Accept": "application/vnd.github+json",
            }
        )

        if self.token:
            self.session.headers.update({"Authorization": f"token {self.token}"})
            logger.debug("GitHub token configured")

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request to the API and return the decoded JSON body.

        Raises:
            GitHubAPIError: If the response status is not 2xx
            requests.RequestException: On transport failures
        """
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {url}")
        response = self.session.request(
            method, url, json=json, params=params, timeout=self.timeout
        )

        if not response.ok:
            try:
                message = response.json().get("message", response.reason)
            except ValueError:
                message = response.text or response.reason
            raise GitHubAPIError(response.status_code, str(message), url)

        if not response.content:
            return {}
        return response.json()

    def get_content(
        self, repo: Repo, path: str, ref: Optional[str] = None
    ) -> Optional[Any]:
        """Get the contents entry for a path.

        Args:
            repo: Repository to read from
            path: Path of the file or directory in the repository
            ref: Optional git reference (branch, tag or commit sha)

        Returns:
            Decoded API response (a dict for files, a list for directories),
            or None if the path does not exist
        """
        encoded_path = quote(path.lstrip("/"), safe="/")
        params = {"ref": ref} if ref else None
        try:
            return self._request(
                "GET",
                f"/repos/{repo.owner}/{repo.repo}/contents/{encoded_path}",
                params=params,
            )
        except GitHubAPIError as e:
            if e.status == 404:
                logger.debug(f"Not found: {repo}:{ref}:{path}")
                return None
            raise

    def create_pull_request(
        self, options: PullRequestOptions
    ) -> Optional[PullRequest]:
        """Commit the given changes to a new branch and open a pull request.

        Args:
            options: Target repository, branch, title, body and file changes

        Returns:
            The created pull request, or None if there was nothing to commit

        Raises:
            ReferenceAlreadyExistsError: If the head branch already exists
            GitHubAPIError: For any other API failure
        """
        owner, name = options["owner"], options["repo"]
        prefix = f"/repos/{owner}/{name}"

        base = options.get("base") or self._get_default_branch(prefix)
        base_sha = self._request("GET", f"{prefix}/git/ref/heads/{quote(base, safe='/')}")[
            "object"
        ]["sha"]
        logger.debug(f"Base branch {base} of {owner}/{name} is at {base_sha}")

        latest_sha = base_sha
        for change in options["changes"]:
            commit_sha = self._commit_change(prefix, latest_sha, change)
            if commit_sha:
                latest_sha = commit_sha

        if latest_sha == base_sha:
            logger.debug(f"No changes to commit to {owner}/{name}")
            return None

        self._create_ref(prefix, options["head"], latest_sha)

        pr_data = self._request(
            "POST",
            f"{prefix}/pulls",
            json={
                "title": options["title"],
                "body": options["body"],
                "head": options["head"],
                "base": base,
            },
        )
        return {"number": pr_data["number"], "html_url": pr_data["html_url"]}

    def _get_default_branch(self, prefix: str) -> str:
        data = self._request("GET", prefix)
        return data.get("default_branch", "main")

    def _commit_change(
        self, prefix: str, parent_sha: str, change: CommitChanges
    ) -> Optional[str]:
        """Create a commit for one change on top of ``parent_sha``.

        Returns:
            The new commit sha, or None if the change produces an identical tree
            and empty commits are not allowed
        """
        files = change["files"]
        if not files and not change["empty_commit"]:
            return None

        parent_tree = self._request("GET", f"{prefix}/git/commits/{parent_sha}")[
            "tree"
        ]["sha"]

        tree_entries = []
        for path, file in files.items():
            blob = self._request(
                "POST",
                f"{prefix}/git/blobs",
                json={"content": file["content"], "encoding": file["encoding"]},
            )
            tree_entries.append(
                {
                    "path": path,
                    "mode": file.get("mode", FILE_MODE),
                    "type": "blob",
                    "sha": blob["sha"],
                }
            )

        tree_sha = parent_tree
        if tree_entries:
            tree_sha = self._request(
                "POST",
                f"{prefix}/git/trees",
                json={"base_tree": parent_tree, "tree": tree_entries},
            )["sha"]

        if tree_sha == parent_tree and not change["empty_commit"]:
            return None

        commit = self._request(
            "POST",
            f"{prefix}/git/commits",
            json={
                "message": change["commit"],
                "tree": tree_sha,
                "parents": [parent_sha],
            },
        )
        return commit["sha"]

    def _create_ref(self, prefix: str, branch: str, sha: str) -> None:
        try:
            self._request(
                "POST",
                f"{prefix}/git/refs",
                json={"ref": f"refs/heads/{branch}", "sha": sha},
            )
        except GitHubAPIError as e:
            if e.status == 422 and "reference already exists" in e.message.lower():
                raise ReferenceAlreadyExistsError(e.status, e.message, e.url) from e
            raise

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> GitHubClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
