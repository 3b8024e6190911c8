"""Revision resolution."""

from ..ports import LoggerPort, MirrorPort
from .errors import UnknownRevisionError
from .models import TIP, CommitId


class RevisionResolver:
    """Maps user references to full commit ids through the mirror.

    The ``tip`` sentinel is never handed to the mirror: it means "fetch the
    tracked branch and take its new head".
    """

    def __init__(self, mirror: MirrorPort, branch: str, logger: LoggerPort):
        self.mirror = mirror
        self.branch = branch
        self.logger = logger

    def resolve(self, ref: str) -> CommitId:
        if ref == TIP:
            return self.fetch_head()

        self.mirror.ensure_cloned()
        commit = self.mirror.resolve_commit(ref) if ref else None
        if commit is None:
            raise UnknownRevisionError(ref)
        self.logger.debug("Resolved revision", ref=ref, commit=commit)
        return commit

    def fetch_head(self) -> CommitId:
        """Fetch the tracked branch and return its new head."""
        if self.mirror.ensure_cloned() is None:
            self.mirror.fetch_any(self.branch)
        commit = self.head()
        if commit is None:
            raise UnknownRevisionError(self.branch)
        return commit

    def head(self) -> CommitId | None:
        """Head of the tracked branch as currently known to the mirror."""
        return self.mirror.resolve_commit(f"refs/heads/{self.branch}")
