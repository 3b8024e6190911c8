"""Tip alias port interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..core.models import CommitId


class AliasPort(Protocol):
    """Port for the single movable "most recent" pointer."""

    def set(self, commit: CommitId) -> None:
        """Atomically point the alias at commit."""
        ...

    def resolve(self) -> CommitId | None:
        """Commit the alias names, or None if unset."""
        ...

    def clear(self) -> None:
        """Remove the alias."""
        ...
