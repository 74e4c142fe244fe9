"""Pytest configuration and shared fixtures."""

import base64
from typing import Any, Optional

import pytest

from template_sync.context import RunContext
from template_sync.exceptions import ReferenceAlreadyExistsError
from template_sync.repo import Repo


def b64(text: str) -> str:
    """Base64 encode a text string."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def file_entry(text: str) -> dict:
    """A contents API response for a file."""
    return {"type": "file", "encoding": "base64", "content": b64(text)}


class FakeGitHub:
    """In-memory content and pull request provider.

    ``contents`` maps paths in the source repository to API responses.
    ``open_branches`` holds ``owner/repo`` destinations that already have the
    sync branch; ``unchanged`` holds destinations already matching the changes.
    """

    def __init__(self, contents: Optional[dict[str, Any]] = None):
        self.contents = contents or {}
        self.content_calls: list[tuple[Repo, str, Optional[str]]] = []
        self.pr_calls: list[dict] = []
        self.open_branches: set[str] = set()
        self.unchanged: set[str] = set()
        self.errors: dict[str, Exception] = {}
        self._next_number = 1

    def get_content(self, repo: Repo, path: str, ref: Optional[str] = None):
        self.content_calls.append((repo, path, ref))
        return self.contents.get(path)

    def create_pull_request(self, options):
        self.pr_calls.append(options)
        dest = f"{options['owner']}/{options['repo']}"
        if dest in self.errors:
            raise self.errors[dest]
        if dest in self.unchanged or not options["changes"][0]["files"]:
            return None
        if dest in self.open_branches:
            raise ReferenceAlreadyExistsError(422, "Reference already exists")
        self.open_branches.add(dest)
        number = self._next_number
        self._next_number += 1
        return {"number": number, "html_url": f"https://github.com/{dest}/pull/{number}"}


@pytest.fixture
def source_repo() -> Repo:
    """Return the source repository."""
    return Repo("acme", "templates")


@pytest.fixture
def context(source_repo: Repo) -> RunContext:
    """Return a run context for the source repository."""
    return RunContext(
        repo=source_repo,
        sha="0123456789abcdef0123456789abcdef01234567",
        run_id="42",
        html_url="https://github.com/acme/templates",
        config_file=".github/file-sync.yml",
    )


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Return an empty fake provider."""
    return FakeGitHub()
