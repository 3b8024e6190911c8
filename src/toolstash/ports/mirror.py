"""Version control mirror port interface."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..core.models import CommitId, CommitSummary, Remote


class MirrorPort(Protocol):
    """Port for the local mirror of upstream history."""

    def ensure_cloned(self) -> Remote | None:
        """Create the mirror on first use. Idempotent.

        Returns the remote fetched from if this call created the mirror.
        """
        ...

    def fetch(self, remote: Remote, branch: str) -> None:
        """Fetch branch from a single remote."""
        ...

    def fetch_any(self, branch: str) -> Remote:
        """Fetch branch from the first remote that answers, in preference order."""
        ...

    def resolve_commit(self, ref: str) -> CommitId | None:
        """Resolve ref to a full commit id, or None if it names no commit."""
        ...

    def materialize_checkout(self, commit: CommitId, dest: Path) -> None:
        """Create a working tree of commit at dest."""
        ...

    def remove_checkout(self, dest: Path) -> None:
        """Remove a working tree created by materialize_checkout."""
        ...

    def log_descending_by_commit_time(self, commits: list[CommitId]) -> list[CommitSummary]:
        """Summaries of commits, newest commit time first."""
        ...
