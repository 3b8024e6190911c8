"""Shared fixtures and in-memory fakes for the external collaborators."""

from __future__ import annotations

import hashlib
import shutil
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from toolstash.adapters import (
    FsArtifactCacheAdapter,
    FsCheckoutCacheAdapter,
    NoopMetricsAdapter,
    SymlinkAliasAdapter,
)
from toolstash.core import ToolstashService
from toolstash.core.errors import BuildFailedError, MirrorUnreachableError, VcsCommandError
from toolstash.core.models import ArtifactLayout, CommitId, CommitSummary, Remote

LAYOUT = ArtifactLayout(binary="bin/go", tool_dirs=("pkg/tool",))


def make_commit_id(seed: str) -> CommitId:
    return hashlib.sha1(seed.encode()).hexdigest()


# =============================================================================
# Fakes
# =============================================================================


class RecordingLogger:
    """LoggerPort that keeps every record."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def debug(self, message: str, **kwargs: Any) -> None:
        self.records.append(("debug", message, kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.records.append(("info", message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.records.append(("warning", message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self.records.append(("error", message, kwargs))

    def log_operation(
        self,
        op: str,
        key: str,
        durations: dict[str, float],
        cache_hit: bool = False,
        **kwargs: Any,
    ) -> None:
        self.records.append(("operation", op, {"key": key, "cache_hit": cache_hit, **kwargs}))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


class SteppingClock:
    """Clock that advances one second per call."""

    def __init__(self) -> None:
        self.current = datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class FakeCommit:
    commit: CommitId
    committed_at: datetime
    subject: str
    files: dict[str, str] = field(default_factory=dict)


class FakeMirror:
    """MirrorPort keeping history in memory and writing plain directories."""

    def __init__(self, remotes: Sequence[Remote] = (), branch: str = "master") -> None:
        self.remotes = tuple(remotes) or (
            Remote("origin", "https://example.invalid/primary"),
            Remote("github", "https://example.invalid/fallback"),
        )
        self.branch = branch
        self.upstream: dict[str, FakeCommit] = {}
        self.upstream_heads: dict[str, CommitId] = {}
        self.local: dict[str, FakeCommit] = {}
        self.refs: dict[str, CommitId] = {}
        self.non_commits: set[str] = set()
        self.unreachable: set[str] = set()
        self.cloned = False
        self.fetches: list[str] = []
        self.materialized: list[CommitId] = []

    def add_commit(self, seed: str, subject: str = "", *, day: int = 1, head: bool = False) -> CommitId:
        commit = make_commit_id(seed)
        self.upstream[commit] = FakeCommit(
            commit=commit,
            committed_at=datetime(2024, 1, day, tzinfo=UTC),
            subject=subject or seed,
            files={"README": f"{seed}\n", "src/make.bash": "#!/bin/sh\n"},
        )
        if head:
            self.upstream_heads[self.branch] = commit
        return commit

    def ensure_cloned(self) -> Remote | None:
        if self.cloned:
            return None
        remote = self.fetch_any(self.branch)
        self.cloned = True
        return remote

    def fetch(self, remote: Remote, branch: str) -> None:
        if remote.name in self.unreachable:
            raise VcsCommandError(["fetch", remote.name], 128, "unreachable")
        self.fetches.append(remote.name)
        self.local.update(self.upstream)
        if branch in self.upstream_heads:
            self.refs[f"refs/heads/{branch}"] = self.upstream_heads[branch]

    def fetch_any(self, branch: str) -> Remote:
        failures = {}
        for remote in self.remotes:
            try:
                self.fetch(remote, branch)
            except VcsCommandError as e:
                failures[remote.name] = e.stderr
                continue
            return remote
        raise MirrorUnreachableError(branch, failures)

    def resolve_commit(self, ref: str) -> CommitId | None:
        if ref in self.non_commits:
            return None
        if ref in self.refs:
            return self.refs[ref]
        if f"refs/heads/{ref}" in self.refs:
            return self.refs[f"refs/heads/{ref}"]
        matches = [c for c in self.local if len(ref) >= 4 and c.startswith(ref)]
        return matches[0] if len(matches) == 1 else None

    def materialize_checkout(self, commit: CommitId, dest: Path) -> None:
        if dest.exists():
            raise VcsCommandError(["worktree", "add", str(dest)], 128, "already exists")
        self.materialized.append(commit)
        for rel, text in self.local[commit].files.items():
            path = dest / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)

    def remove_checkout(self, dest: Path) -> None:
        if dest.exists():
            shutil.rmtree(dest)

    def log_descending_by_commit_time(self, commits: list[CommitId]) -> list[CommitSummary]:
        summaries = [
            CommitSummary(c, self.local[c].committed_at, self.local[c].subject)
            for c in commits
            if c in self.local
        ]
        return sorted(summaries, key=lambda s: s.committed_at, reverse=True)


class FakeBuilder:
    """BuilderPort that lays out a runnable binary and a tool directory."""

    def __init__(self, layout: ArtifactLayout = LAYOUT) -> None:
        self.layout = layout
        self.calls: list[CommitId] = []
        self.fail_status: int | None = None
        self.before_output: Callable[[CommitId, Path], None] | None = None

    def build(self, commit: str, tree: Path) -> None:
        self.calls.append(commit)
        if self.before_output is not None:
            self.before_output(commit, tree)
        if self.fail_status is not None:
            raise BuildFailedError(commit, self.fail_status, "compile error\n")

        binary = tree / self.layout.binary
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_text(f'#!/bin/sh\necho "built {commit[:12]} $@"\n')
        binary.chmod(0o755)
        for tool_dir in self.layout.tool_dirs:
            tool = tree / tool_dir / "linux_amd64" / "compile"
            tool.parent.mkdir(parents=True, exist_ok=True)
            tool.write_text(f"compile {commit}\n")


class RecordingRunner:
    """RunnerPort that records invocations instead of executing."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[tuple[Path, tuple[str, ...], dict[str, str]]] = []

    def run(self, binary: Path, args: Sequence[str], env: Mapping[str, str]) -> int:
        self.calls.append((binary, tuple(args), dict(env)))
        return self.exit_code


# =============================================================================
# Fixtures
# =============================================================================


@dataclass
class Harness:
    """A service wired to real filesystem caches and fake collaborators."""

    home: Path
    mirror: FakeMirror
    builder: FakeBuilder
    runner: RecordingRunner
    logger: RecordingLogger
    service: ToolstashService
    checkouts: FsCheckoutCacheAdapter
    artifacts: FsArtifactCacheAdapter
    alias: SymlinkAliasAdapter


def build_harness(home: Path, mirror: FakeMirror, builder: FakeBuilder | None = None) -> Harness:
    logger = RecordingLogger()
    builder = builder or FakeBuilder()
    runner = RecordingRunner()
    checkouts = FsCheckoutCacheAdapter(home / "src", mirror, logger)
    artifacts = FsArtifactCacheAdapter(home / "bin", LAYOUT, logger)
    alias = SymlinkAliasAdapter(home / "bin", logger)
    service = ToolstashService(
        mirror=mirror,
        builder=builder,
        checkouts=checkouts,
        artifacts=artifacts,
        alias=alias,
        runner=runner,
        clock=SteppingClock(),
        logger=logger,
        metrics=NoopMetricsAdapter(),
        branch=mirror.branch,
        root_env_var="GOROOT",
        base_env={"PATH": "/usr/bin:/bin"},
    )
    return Harness(home, mirror, builder, runner, logger, service, checkouts, artifacts, alias)


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def mirror() -> FakeMirror:
    return FakeMirror()


@pytest.fixture
def harness(tmp_path: Path, mirror: FakeMirror) -> Harness:
    return build_harness(tmp_path / "home", mirror)


@pytest.fixture
def produced_tree(tmp_path: Path) -> Path:
    """A source tree after a successful build."""
    tree = tmp_path / "tree"
    tree.mkdir()
    FakeBuilder().build(make_commit_id("produced"), tree)
    return tree
