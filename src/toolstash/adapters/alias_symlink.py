"""Symlink tip alias adapter."""

import os
import uuid
from pathlib import Path

from ..core.models import CommitId
from ..ports import LoggerPort


class SymlinkAliasAdapter:
    """Alias stored as a relative symlink ``<root>/<name> -> <commit>``.

    The link target is the only record of what the alias names.
    """

    def __init__(self, root: Path, logger: LoggerPort, name: str = "tip"):
        self.root = root
        self.name = name
        self.logger = logger

    @property
    def link(self) -> Path:
        return self.root / self.name

    def set(self, commit: CommitId) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = self.root / f".{self.name}.{uuid.uuid4().hex}"
        os.symlink(commit, tmp, target_is_directory=True)
        try:
            os.replace(tmp, self.link)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        self.logger.info("Alias updated", alias=self.name, commit=commit)

    def resolve(self) -> CommitId | None:
        try:
            target = os.readlink(self.link)
        except FileNotFoundError:
            return None
        return Path(target).name

    def clear(self) -> None:
        self.link.unlink(missing_ok=True)
        self.logger.info("Alias cleared", alias=self.name)
