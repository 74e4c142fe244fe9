"""Build the commit change-set submitted with each sync pull request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import FileRef
from .github import EXECUTABLE_MODE, CommitChanges, FilePayload

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "🔃 File Sync"


@dataclass(frozen=True)
class FileChange:
    """Base64 content for one destination path."""

    content: str
    executable: bool = False


@dataclass(frozen=True)
class ChangeSet:
    """Destination-path keyed file changes for a single commit."""

    files: dict[str, FileChange] = field(default_factory=dict)
    commit_message: str = COMMIT_MESSAGE
    allow_empty_commit: bool = False

    def __bool__(self) -> bool:
        return bool(self.files)

    def to_payload(self) -> CommitChanges:
        """Render in the shape the pull request provider expects."""
        files: dict[str, FilePayload] = {}
        for path, change in self.files.items():
            payload: FilePayload = {"content": change.content, "encoding": "base64"}
            if change.executable:
                payload["mode"] = EXECUTABLE_MODE
            files[path] = payload
        return {
            "files": files,
            "commit": self.commit_message,
            "empty_commit": self.allow_empty_commit,
        }


def is_executable(src: str) -> bool:
    """Shell scripts are committed with the executable bit set."""
    return src.endswith(".sh")


def build_change_set(files: list[FileRef]) -> ChangeSet:
    """Convert fetched files into a change-set.

    Files without content (fetch misses, directories) are omitted rather than
    treated as errors. When two files share a destination, the later one wins.

    Args:
        files: File references with ``content`` attached by the fetcher

    Returns:
        Change-set with one entry per file that has content
    """
    changes: dict[str, FileChange] = {}
    for file in files:
        content = file.get("content")
        if not content:
            logger.debug(f"Skipping {file['src']}: no content")
            continue

        dest = file.get("dest") or file["src"]
        executable = is_executable(file["src"])
        if executable:
            logger.info(f"Marking {dest} as executable")
        changes[dest] = FileChange(content=content, executable=executable)

    return ChangeSet(files=changes)
