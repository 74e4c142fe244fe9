"""Configuration parsing and validation for template-file-sync.

This module fetches the YAML sync configuration from the source repository
and validates that it describes which files go to which repositories.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional

import yaml
from typing_extensions import NotRequired, TypedDict

from .exceptions import ConfigNotFoundError, ConfigParseError, InvalidRepoReference
from .github import ContentProvider
from .repo import Repo

logger = logging.getLogger(__name__)


class FileRef(TypedDict):
    """A source file to sync.

    ``dest`` defaults to ``src`` when absent. ``content`` is the base64 encoded
    file body, attached by the file fetcher.
    """

    src: str
    dest: NotRequired[str]
    content: NotRequired[str]


class SyncGroup(TypedDict):
    """A set of source files paired with the repositories they are synced to."""

    files: list[FileRef]
    repos: list[str]


class SyncConfig(TypedDict):
    """Main configuration structure."""

    syncs: list[SyncGroup]


def load_config(
    provider: ContentProvider, repo: Repo, path: str, ref: Optional[str] = None
) -> SyncConfig:
    """Fetch and validate the sync configuration from a repository.

    A top-level ``_extends: [owner/]repo[:path]`` key pulls in a base
    configuration from another repository (or another path); keys in the
    extending file replace the base's keys. Only one level is followed.

    Args:
        provider: Repository content provider
        repo: Repository holding the configuration
        path: Path of the configuration file in the repository
        ref: Optional git reference to read the file at

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigNotFoundError: If the path doesn't exist or isn't a file
        ConfigParseError: If the content can't be decoded into a SyncConfig

    Example:
        >>> config = load_config(client, Repo("acme", "templates"), ".github/file-sync.yml")
        >>> print(len(config["syncs"]))
        2
    """
    logger.info(f"Fetching '{path}' from {repo}")
    data = _load_document(provider, repo, path, ref)

    if isinstance(data, dict) and "_extends" in data:
        data = dict(data)
        base_repo, base_path = _parse_extends(data.pop("_extends"), repo, path)
        base_ref = ref if base_repo == repo else None
        logger.info(f"Extending '{base_path}' from {base_repo}")
        base = _load_document(provider, base_repo, base_path, base_ref)
        if base is None:
            base = {}
        if not isinstance(base, dict):
            raise ConfigParseError(
                f"Extended configuration must be a dictionary: {base_repo}:{base_path}"
            )
        base.pop("_extends", None)
        data = {**base, **data}

    config = validate_config(data)
    logger.info(f"Config:\n{yaml.safe_dump(dict(config), sort_keys=False)}")
    if not config["syncs"]:
        logger.warning("Nothing to sync")
    return config


def _load_document(
    provider: ContentProvider, repo: Repo, path: str, ref: Optional[str]
) -> Any:
    """Fetch a YAML document and return the raw parsed data."""
    data = provider.get_content(repo, path, ref)
    if data is None:
        raise ConfigNotFoundError(f"Configuration file not found: {repo}:{path}")
    if not isinstance(data, dict) or data.get("type", "file") != "file":
        raise ConfigNotFoundError(f"Configuration path is not a file: {repo}:{path}")

    # files over 1 MB come back with encoding "none" and no inline content
    encoding = data.get("encoding", "base64")
    if encoding != "base64":
        raise ConfigParseError(
            f"Configuration content is not retrievable (encoding: {encoding!r}): {repo}:{path}"
        )

    try:
        text = base64.b64decode(data.get("content") or "").decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ConfigParseError(f"Failed to decode configuration content: {e}") from e

    return _parse_yaml(text)


def _parse_extends(value: Any, repo: Repo, path: str) -> tuple[Repo, str]:
    """Resolve an ``_extends`` value of the form ``[owner/]repo[:path]``."""
    if not isinstance(value, str) or not value.strip():
        raise ConfigParseError("'_extends' must be a non-empty string")

    target, _, base_path = value.strip().partition(":")
    try:
        base_repo = Repo.parse(target, default_owner=repo.owner)
    except InvalidRepoReference as e:
        raise ConfigParseError(f"Invalid '_extends' value {value!r}: {e}") from e

    return base_repo, base_path or path


def parse_config(text: str) -> SyncConfig:
    """Parse configuration text (YAML or JSON).

    An empty document or a missing ``syncs`` key yields an empty sync list;
    callers treat that as a no-op run rather than an error.

    Raises:
        ConfigParseError: If the YAML is malformed or the structure is invalid
    """
    return validate_config(_parse_yaml(text))


def _parse_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML configuration: {e}") from e


def validate_config(data: Any) -> SyncConfig:
    """Validate configuration data structure.

    Args:
        data: Raw configuration data to validate

    Returns:
        Validated configuration

    Raises:
        ConfigParseError: If the configuration structure is invalid
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError("Configuration must be a dictionary")

    syncs = data.get("syncs")
    if syncs is None:
        return {"syncs": []}
    if not isinstance(syncs, list):
        raise ConfigParseError("'syncs' must be a list")

    return {"syncs": [_validate_group(i, group) for i, group in enumerate(syncs)]}


def _validate_group(i: int, group: Any) -> SyncGroup:
    if not isinstance(group, dict):
        raise ConfigParseError(f"Sync {i} must be a dictionary")

    for field in ("files", "repos"):
        if field not in group:
            raise ConfigParseError(f"Sync {i} missing required field: {field}")

    files = group["files"]
    repos = group["repos"]
    if not isinstance(files, list):
        raise ConfigParseError(f"Sync {i}: 'files' must be a list")
    if not isinstance(repos, list):
        raise ConfigParseError(f"Sync {i}: 'repos' must be a list")

    validated_files: list[FileRef] = []
    for j, file in enumerate(files):
        if not isinstance(file, dict):
            raise ConfigParseError(f"Sync {i}, file {j}: must be a dictionary")
        src = file.get("src")
        if not isinstance(src, str) or not src:
            raise ConfigParseError(f"Sync {i}, file {j}: 'src' must be a non-empty string")

        ref: FileRef = {"src": src}
        if file.get("dest") is not None:
            dest = file["dest"]
            if not isinstance(dest, str) or not dest:
                raise ConfigParseError(
                    f"Sync {i}, file {j}: 'dest' must be a non-empty string"
                )
            ref["dest"] = dest
        validated_files.append(ref)

    for j, repo in enumerate(repos):
        if not isinstance(repo, str) or not repo.strip():
            raise ConfigParseError(f"Sync {i}, repo {j}: must be a non-empty string")

    return {"files": validated_files, "repos": list(repos)}
