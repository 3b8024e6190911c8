"""Filesystem source checkout cache adapter."""

from pathlib import Path

from ..core.errors import VcsCommandError
from ..core.models import CommitId
from ..ports import LoggerPort, MirrorPort


class FsCheckoutCacheAdapter:
    """One mirror checkout per commit under ``root``.

    Checkouts are trusted on existence and never verified; they can always
    be recreated from the mirror.
    """

    def __init__(self, root: Path, mirror: MirrorPort, logger: LoggerPort):
        self.root = root
        self.mirror = mirror
        self.logger = logger

    def path(self, commit: CommitId) -> Path:
        return self.root / commit

    def ensure(self, commit: CommitId) -> Path:
        path = self.path(commit)
        if path.exists():
            return path

        self.root.mkdir(parents=True, exist_ok=True)
        try:
            self.mirror.materialize_checkout(commit, path)
        except VcsCommandError:
            if not path.exists():
                raise
            self.logger.info("Checkout created concurrently, using existing", commit=commit)
        return path

    def remove(self, commit: CommitId) -> bool:
        path = self.path(commit)
        if not path.exists():
            return False
        self.mirror.remove_checkout(path)
        self.logger.info("Removed checkout", commit=commit)
        return True

    def evict_all(self) -> list[CommitId] | None:
        if not self.root.is_dir():
            return None

        removed: list[CommitId] = []
        for entry in sorted(self.root.iterdir()):
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            self.mirror.remove_checkout(entry)
            removed.append(entry.name)
            self.logger.debug("Evicted checkout", commit=entry.name)
        return removed
