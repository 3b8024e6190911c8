"""Filesystem binary artifact cache adapter."""

import os
import shutil
import tempfile
import uuid
from pathlib import Path

from ..core.errors import BuildFailedError, NotFoundError
from ..core.models import ArtifactLayout, ArtifactPaths, CommitId
from ..ports import LoggerPort


class FsArtifactCacheAdapter:
    """One directory of build outputs per commit under ``root``.

    Entries are published by renaming a fully populated staging directory
    into place and retired by renaming them aside before deletion, so an
    entry whose binary is present is always complete.
    """

    def __init__(
        self,
        root: Path,
        layout: ArtifactLayout,
        logger: LoggerPort,
        alias_name: str = "tip",
    ):
        self._root = root
        self.layout = layout
        self.logger = logger
        self.alias_name = alias_name

    @property
    def root(self) -> Path:
        return self._root

    def _entry(self, commit: CommitId) -> Path:
        return self._root / commit

    def _paths(self, commit: CommitId) -> ArtifactPaths:
        entry = self._entry(commit)
        return ArtifactPaths(
            commit=commit,
            root=entry,
            binary=entry / self.layout.binary,
            tool_dirs=tuple(entry / d for d in self.layout.tool_dirs),
        )

    def has(self, commit: CommitId) -> bool:
        binary = self._entry(commit) / self.layout.binary
        return binary.is_file() and os.access(binary, os.X_OK)

    def get(self, commit: CommitId) -> ArtifactPaths | None:
        if not self.has(commit):
            return None
        return self._paths(commit)

    def store(self, commit: CommitId, tree: Path) -> ArtifactPaths:
        """Copy the build outputs of tree into the entry for commit.

        If another builder published the entry first, its entry is kept
        and this copy is discarded.
        """
        if self.has(commit):
            self.logger.info("Artifact already stored, skipping copy", commit=commit)
            return self._paths(commit)

        self._root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=self._root, prefix=f".{commit}."))
        try:
            for rel in self.layout.paths():
                src = tree / rel
                dst = staging / rel
                dst.parent.mkdir(parents=True, exist_ok=True)
                if src.is_dir():
                    shutil.copytree(src, dst, symlinks=True)
                elif src.is_file():
                    shutil.copy2(src, dst)
                else:
                    raise BuildFailedError(commit, 0, reason=f"did not produce {rel}")

            binary = staging / self.layout.binary
            if not os.access(binary, os.X_OK):
                raise BuildFailedError(
                    commit, 0, reason=f"produced a non-executable {self.layout.binary}"
                )

            self._publish(commit, staging)
        finally:
            if staging.exists():
                shutil.rmtree(staging)

        self.logger.info("Stored artifact", commit=commit, path=str(self._entry(commit)))
        return self._paths(commit)

    def _publish(self, commit: CommitId, staging: Path) -> None:
        entry = self._entry(commit)
        if entry.exists() and not self.has(commit):
            self.logger.warning("Replacing incomplete artifact entry", commit=commit)
            self._retire(entry)
        try:
            os.rename(staging, entry)
        except OSError:
            if not self.has(commit):
                raise
            self.logger.info("Artifact stored concurrently, using existing", commit=commit)

    def _retire(self, entry: Path) -> None:
        trash = self._root / f".{entry.name}.rm-{uuid.uuid4().hex}"
        os.rename(entry, trash)
        shutil.rmtree(trash)

    def remove(self, commit: CommitId) -> None:
        entry = self._entry(commit)
        try:
            self._retire(entry)
        except FileNotFoundError:
            raise NotFoundError(f"No artifact for {commit[:12]}") from None
        self.logger.info("Removed artifact", commit=commit)

    def link_into(self, paths: ArtifactPaths, tree: Path) -> None:
        """Replace the build output locations in tree with links into the entry.

        Files are swapped with ``os.replace`` in one step. A real directory
        cannot be replaced by a link, so it is renamed aside first and is
        briefly absent before the link appears.
        """
        for rel in self.layout.paths():
            target = paths.root / rel
            link = tree / rel
            if link.is_symlink() and Path(os.readlink(link)) == target:
                continue
            link.parent.mkdir(parents=True, exist_ok=True)
            tmp = link.parent / f".{link.name}.{uuid.uuid4().hex}"
            os.symlink(target, tmp, target_is_directory=target.is_dir())
            aside: Path | None = None
            if link.is_dir() and not link.is_symlink():
                aside = link.parent / f".{link.name}.rm-{uuid.uuid4().hex}"
                os.rename(link, aside)
            os.replace(tmp, link)
            if aside is not None:
                shutil.rmtree(aside)
        self.logger.debug("Linked artifact into tree", commit=paths.commit, tree=str(tree))

    def unlink_from(self, tree: Path) -> None:
        for rel in self.layout.paths():
            link = tree / rel
            if link.is_symlink():
                link.unlink()

    def list_ids(self) -> list[CommitId] | None:
        if not self._root.is_dir():
            return None
        return [
            entry.name
            for entry in sorted(self._root.iterdir())
            if not entry.name.startswith(".")
            and entry.name != self.alias_name
            and not entry.is_symlink()
            and self.has(entry.name)
        ]
