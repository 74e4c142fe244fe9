"""Repository identifiers in ``owner/repo`` form."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidRepoReference


@dataclass(frozen=True)
class Repo:
    """A GitHub repository identified by owner and name."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, value: str, default_owner: str) -> Repo:
        """Parse ``"owner/repo"`` or a bare ``"repo"`` string.

        A bare name is resolved against ``default_owner``.

        Raises:
            InvalidRepoReference: If the string is empty, either part is blank,
                has more than one ``/`` or contains whitespace
        """
        value = (value or "").strip()
        if not value:
            raise InvalidRepoReference("Repository reference must not be empty")

        parts = value.split("/")
        if len(parts) == 2:
            owner, name = parts
        elif len(parts) == 1:
            owner, name = default_owner, parts[0]
        else:
            raise InvalidRepoReference(f"Invalid repository reference: {value!r}")

        if not owner or not name or any(c.isspace() for c in owner + name):
            raise InvalidRepoReference(f"Invalid repository reference: {value!r}")

        return cls(owner=owner, repo=name)

    def to_str(self, sep: str = "/") -> str:
        """Render as ``owner<sep>repo``."""
        return f"{self.owner}{sep}{self.repo}"

    def __str__(self) -> str:
        return self.to_str()
