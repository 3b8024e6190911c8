"""Cache port interfaces."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..core.models import ArtifactPaths, CommitId


class CheckoutCachePort(Protocol):
    """Port for the disposable source checkout cache."""

    def path(self, commit: CommitId) -> Path:
        """Get path where the checkout for commit lives."""
        ...

    def ensure(self, commit: CommitId) -> Path:
        """Return the checkout for commit, materializing it if absent."""
        ...

    def remove(self, commit: CommitId) -> bool:
        """Remove one checkout. Returns False if it was not present."""
        ...

    def evict_all(self) -> list[CommitId] | None:
        """Remove every checkout. Returns None if the cache root is absent."""
        ...


class ArtifactCachePort(Protocol):
    """Port for the durable binary artifact cache."""

    @property
    def root(self) -> Path:
        """Directory holding all artifact entries."""
        ...

    def has(self, commit: CommitId) -> bool:
        """Check the entry exists and its binary is executable."""
        ...

    def get(self, commit: CommitId) -> ArtifactPaths | None:
        """Get entry paths, or None if the entry is absent."""
        ...

    def store(self, commit: CommitId, tree: Path) -> ArtifactPaths:
        """Copy build outputs from tree into a complete entry."""
        ...

    def remove(self, commit: CommitId) -> None:
        """Delete an entry. Raises NotFoundError if absent."""
        ...

    def link_into(self, paths: ArtifactPaths, tree: Path) -> None:
        """Point the build output locations of tree at the entry."""
        ...

    def unlink_from(self, tree: Path) -> None:
        """Drop links placed by link_into from tree."""
        ...

    def list_ids(self) -> list[CommitId] | None:
        """List entry keys. Returns None if the cache root is absent."""
        ...
