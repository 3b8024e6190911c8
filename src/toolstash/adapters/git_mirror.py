"""Git mirror adapter."""

import os
import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..core.errors import MirrorUnreachableError, VcsCommandError
from ..core.models import CommitId, CommitSummary, Remote, is_commit_id
from ..ports import LoggerPort


class GitMirrorAdapter:
    """Bare git mirror with detached worktrees as checkouts."""

    def __init__(
        self,
        path: Path,
        remotes: Sequence[Remote],
        branch: str,
        logger: LoggerPort,
        git: str = "git",
    ):
        if not remotes:
            raise ValueError("At least one remote is required")
        self.path = path
        self.remotes = tuple(remotes)
        self.branch = branch
        self.logger = logger
        self.git = git

    def _git(
        self,
        *args: str,
        git_dir: Path | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        cmd = [self.git, f"--git-dir={git_dir or self.path}", *args]
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        self.logger.debug("Running git", args=" ".join(args))
        result = subprocess.run(
            cmd, capture_output=True, encoding="utf-8", errors="replace", env=env
        )
        if check and result.returncode != 0:
            raise VcsCommandError(list(args), result.returncode, result.stderr)
        return result

    def is_cloned(self) -> bool:
        return (self.path / "HEAD").is_file()

    def ensure_cloned(self) -> Remote | None:
        """Create the mirror from the first reachable remote.

        The mirror is assembled in a temporary directory and renamed into
        place, so a half-initialized mirror is never visible. Returns the
        remote fetched from when this call created the mirror, else None.
        """
        if self.is_cloned():
            return None

        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=self.path.parent, prefix=".mirror."))
        try:
            self.logger.info("Initializing mirror", path=str(self.path))
            self._git("init", "--bare", "--quiet", git_dir=staging)
            for remote in self.remotes:
                self._git("remote", "add", remote.name, remote.url, git_dir=staging)
            remote = self._fetch_any(self.branch, staging)
            self._git("symbolic-ref", "HEAD", f"refs/heads/{self.branch}", git_dir=staging)
            try:
                os.rename(staging, self.path)
            except OSError:
                if not self.is_cloned():
                    raise
                self.logger.info("Mirror created concurrently, using existing")
                return None
        finally:
            if staging.exists():
                shutil.rmtree(staging)
        return remote

    def fetch(self, remote: Remote, branch: str) -> None:
        self._fetch(remote, branch, self.path)

    def _fetch(self, remote: Remote, branch: str, git_dir: Path) -> None:
        self._git(
            "fetch",
            "--quiet",
            "--tags",
            "--force",
            "--update-head-ok",
            remote.name,
            f"+refs/heads/{branch}:refs/heads/{branch}",
            git_dir=git_dir,
        )

    def fetch_any(self, branch: str) -> Remote:
        return self._fetch_any(branch, self.path)

    def _fetch_any(self, branch: str, git_dir: Path) -> Remote:
        failures: dict[str, str] = {}
        for remote in self.remotes:
            try:
                self._fetch(remote, branch, git_dir)
            except VcsCommandError as e:
                self.logger.warning("Fetch failed, trying next remote", remote=remote.name)
                failures[remote.name] = e.stderr.strip() or f"exit status {e.status}"
                continue
            self.logger.info("Fetched", remote=remote.name, branch=branch)
            return remote
        raise MirrorUnreachableError(branch, failures)

    def resolve_commit(self, ref: str) -> CommitId | None:
        if not ref or ref.startswith("-"):
            return None
        result = self._git(
            "rev-parse", "--verify", "--quiet", "--end-of-options", f"{ref}^{{commit}}", check=False
        )
        commit = result.stdout.strip()
        if result.returncode != 0 or not is_commit_id(commit):
            return None
        return commit

    def materialize_checkout(self, commit: CommitId, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        self.logger.info("Materializing checkout", commit=commit, path=str(dest))
        self._git("worktree", "add", "--detach", "--force", str(dest), commit)

    def remove_checkout(self, dest: Path) -> None:
        if dest.exists():
            result = self._git("worktree", "remove", "--force", "--force", str(dest), check=False)
            if result.returncode != 0:
                self.logger.debug("Not a registered worktree, deleting", path=str(dest))
                try:
                    shutil.rmtree(dest)
                except FileNotFoundError:
                    pass
        self._git("worktree", "prune")

    def log_descending_by_commit_time(self, commits: list[CommitId]) -> list[CommitSummary]:
        if not commits:
            return []
        try:
            return self._log(commits)
        except VcsCommandError:
            # One or more ids are unknown to the mirror; keep the ones it has.
            summaries: list[CommitSummary] = []
            for commit in commits:
                try:
                    summaries.extend(self._log([commit]))
                except VcsCommandError:
                    self.logger.warning("Commit missing from mirror", commit=commit)
            summaries.sort(key=lambda s: s.committed_at, reverse=True)
            return summaries

    def _log(self, commits: list[CommitId]) -> list[CommitSummary]:
        result = self._git("log", "--no-walk=sorted", "--format=%H%x00%ct%x00%s", *commits)
        summaries = []
        for line in result.stdout.splitlines():
            if not line:
                continue
            commit, timestamp, subject = line.split("\x00", 2)
            summaries.append(
                CommitSummary(
                    commit=commit,
                    committed_at=datetime.fromtimestamp(int(timestamp), UTC),
                    subject=subject,
                )
            )
        return summaries
