"""Core domain models."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

# Full-length commit ids: SHA-1 (40 hex) or SHA-256 (64 hex) repositories.
_COMMIT_ID_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")

TIP = "tip"

CommitId = str


def is_commit_id(value: str) -> bool:
    """Return True if value is a canonical full-length commit id."""
    return bool(_COMMIT_ID_RE.match(value))


def short_id(commit: CommitId) -> str:
    return commit[:12]


@dataclass(frozen=True, slots=True)
class Remote:
    """Upstream remote the mirror fetches from."""

    name: str
    url: str

    @classmethod
    def parse(cls, spec: str) -> "Remote":
        """Parse a ``name=url`` remote specification."""
        name, sep, url = spec.partition("=")
        name, url = name.strip(), url.strip()
        if not sep or not name or not url:
            raise ValueError(f"Invalid remote specification (expected name=url): {spec!r}")
        return cls(name=name, url=url)


@dataclass(frozen=True, slots=True)
class ArtifactLayout:
    """Where the external build leaves its outputs, relative to the source tree.

    The same relative layout is used inside an artifact entry and for the
    links placed back into a checkout.
    """

    binary: str = "bin/go"
    tool_dirs: tuple[str, ...] = ("pkg/tool",)

    def paths(self) -> tuple[str, ...]:
        return (self.binary, *self.tool_dirs)


@dataclass(frozen=True, slots=True)
class ArtifactPaths:
    """Absolute locations inside a cached artifact entry."""

    commit: CommitId
    root: Path
    binary: Path
    tool_dirs: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class CommitSummary:
    """One line of mirror history."""

    commit: CommitId
    committed_at: datetime
    subject: str


@dataclass(slots=True)
class BuildSummary:
    """Outcome of a build request."""

    commit: CommitId
    artifact: ArtifactPaths
    cached: bool = False
    tip_updated: bool = False
    duration: float = 0.0


@dataclass(frozen=True, slots=True)
class BuildListing:
    """One entry of the artifact cache listing."""

    commit: CommitId
    committed_at: datetime | None
    subject: str
    is_tip: bool = False


@dataclass(slots=True)
class RemoveResult:
    """Outcome of removing a cached build."""

    commit: CommitId
    checkout_removed: bool = False
    alias_cleared: bool = False


@dataclass(slots=True)
class EvictResult:
    """Outcome of clearing the source checkout cache."""

    root_present: bool
    removed: list[CommitId] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FetchSummary:
    """Outcome of fetching the tracked branch."""

    remote: Remote
    branch: str
    head: CommitId | None
