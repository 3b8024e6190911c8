"""Core domain logic."""

from .config import ToolstashConfig
from .errors import (
    BuildFailedError,
    MirrorUnreachableError,
    NoBuildsYetError,
    NotBuiltError,
    NotFoundError,
    TipNeverBuiltError,
    TipRejectedError,
    ToolstashError,
    UnknownRevisionError,
    VcsCommandError,
)
from .models import (
    TIP,
    ArtifactLayout,
    ArtifactPaths,
    BuildListing,
    BuildSummary,
    CommitId,
    CommitSummary,
    EvictResult,
    FetchSummary,
    Remote,
    RemoveResult,
)
from .resolver import RevisionResolver
from .service import ToolstashService

__all__ = [
    "TIP",
    "ArtifactLayout",
    "ArtifactPaths",
    "BuildFailedError",
    "BuildListing",
    "BuildSummary",
    "CommitId",
    "CommitSummary",
    "EvictResult",
    "FetchSummary",
    "MirrorUnreachableError",
    "NoBuildsYetError",
    "NotBuiltError",
    "NotFoundError",
    "Remote",
    "RemoveResult",
    "RevisionResolver",
    "TipNeverBuiltError",
    "TipRejectedError",
    "ToolstashConfig",
    "ToolstashError",
    "ToolstashService",
    "UnknownRevisionError",
    "VcsCommandError",
]
