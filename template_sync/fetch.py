"""Fetch source file contents ahead of pull request fan-out."""

from __future__ import annotations

import logging
from typing import Optional

from .config import FileRef
from .github import ContentProvider
from .repo import Repo

logger = logging.getLogger(__name__)


def fetch_file(
    provider: ContentProvider, repo: Repo, ref: Optional[str], path: str
) -> Optional[str]:
    """Fetch one file as base64 content.

    Returns:
        Base64 content without line breaks, or None if the path is missing,
        is a directory, or has no inline content (e.g. files over 1 MB)
    """
    data = provider.get_content(repo, path, ref)
    if data is None:
        logger.warning(f"✗ {path} not found in {repo}, skipping")
        return None
    if not isinstance(data, dict) or data.get("type", "file") != "file":
        logger.warning(f"✗ {path} is not a file, skipping")
        return None
    if data.get("encoding", "base64") != "base64" or not data.get("content"):
        logger.warning(f"✗ {path} has no retrievable content, skipping")
        return None

    return "".join(data["content"].split())


def fetch_files(
    provider: ContentProvider, repo: Repo, ref: Optional[str], files: list[FileRef]
) -> list[FileRef]:
    """Fetch every file in a sync group.

    Returns copies of ``files`` with ``content`` attached where the fetch
    succeeded; the input entries are left untouched.

    Raises:
        GitHubAPIError: For API errors other than a missing path
    """
    fetched: list[FileRef] = []
    for file in files:
        logger.info(f"Fetching {file['src']}")
        entry: FileRef = dict(file)  # type: ignore[assignment]
        content = fetch_file(provider, repo, ref, file["src"])
        if content is not None:
            entry["content"] = content
        fetched.append(entry)
    return fetched
