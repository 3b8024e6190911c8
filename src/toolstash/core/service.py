"""Core ToolstashService orchestration."""

import os
from collections.abc import Mapping, Sequence
from datetime import datetime

from ..ports import (
    AliasPort,
    ArtifactCachePort,
    BuilderPort,
    CheckoutCachePort,
    ClockPort,
    LoggerPort,
    MetricsPort,
    MirrorPort,
    RunnerPort,
)
from .errors import (
    BuildFailedError,
    NoBuildsYetError,
    NotBuiltError,
    TipNeverBuiltError,
    TipRejectedError,
)
from .models import (
    TIP,
    ArtifactPaths,
    BuildListing,
    BuildSummary,
    CommitId,
    EvictResult,
    FetchSummary,
    RemoveResult,
)
from .resolver import RevisionResolver


class ToolstashService:
    """Core service tying the mirror, both caches and the tip alias together.

    Every call reads cache state fresh; nothing is remembered between calls.
    """

    def __init__(
        self,
        mirror: MirrorPort,
        builder: BuilderPort,
        checkouts: CheckoutCachePort,
        artifacts: ArtifactCachePort,
        alias: AliasPort,
        runner: RunnerPort,
        clock: ClockPort,
        logger: LoggerPort,
        metrics: MetricsPort,
        branch: str = "master",
        root_env_var: str | None = None,
        base_env: Mapping[str, str] | None = None,
    ):
        """Initialize service with ports.

        Args:
            branch: Tracked upstream branch the tip alias follows.
            root_env_var: Variable pointing the binary at its checkout when run.
            base_env: Environment for the binary. If None, uses os.environ.
        """
        self.mirror = mirror
        self.builder = builder
        self.checkouts = checkouts
        self.artifacts = artifacts
        self.alias = alias
        self.runner = runner
        self.clock = clock
        self.logger = logger
        self.metrics = metrics
        self.branch = branch
        self.root_env_var = root_env_var
        self.base_env = base_env
        self.resolver = RevisionResolver(mirror, branch, logger)

    def _elapsed(self, start_time: datetime) -> float:
        return (self.clock.now() - start_time).total_seconds()

    def fetch(self) -> FetchSummary:
        """Fetch the tracked branch, cloning the mirror on first use."""
        start_time = self.clock.now()
        self.logger.info("Starting fetch", branch=self.branch)

        # A freshly created mirror has just been fetched.
        remote = self.mirror.ensure_cloned() or self.mirror.fetch_any(self.branch)
        head = self.resolver.head()

        duration = self._elapsed(start_time)
        self.logger.log_operation(
            op="fetch",
            key=self.branch,
            durations={"total": duration},
            remote=remote.name,
        )
        self.metrics.timing("toolstash.fetch.duration", duration)
        return FetchSummary(remote=remote, branch=self.branch, head=head)

    def build(self, ref: str) -> BuildSummary:
        """Resolve ref and make sure an artifact exists for it.

        ``tip`` fetches the tracked branch first and moves the alias to the
        new head once its artifact is complete.
        """
        if ref == TIP:
            commit = self.resolver.fetch_head()
            summary = self.build_commit(commit)
            if self._point_tip(commit):
                summary.tip_updated = True
            return summary

        return self.build_commit(self.resolver.resolve(ref))

    def build_commit(self, commit: CommitId) -> BuildSummary:
        """Build commit unless its artifact already exists."""
        start_time = self.clock.now()

        existing = self.artifacts.get(commit)
        if existing is not None:
            self.logger.info("Artifact cached, skipping build", commit=commit)
            self.metrics.increment("toolstash.build.cache_hit")
            return BuildSummary(commit=commit, artifact=existing, cached=True)

        self.logger.info("Starting build", commit=commit)
        tree = self.checkouts.ensure(commit)
        # Links left from an earlier artifact must not be written through.
        self.artifacts.unlink_from(tree)

        try:
            self.builder.build(commit, tree)
            paths = self.artifacts.store(commit, tree)
        except BuildFailedError as e:
            self.logger.error("Build failed", commit=commit, status=e.status)
            self.metrics.increment("toolstash.build.failed")
            raise

        self.artifacts.link_into(paths, tree)

        tip_updated = False
        if commit == self.resolver.head():
            tip_updated = self._point_tip(commit)

        duration = self._elapsed(start_time)
        self.logger.log_operation(
            op="build",
            key=commit,
            durations={"total": duration},
            cache_hit=False,
            tip_updated=tip_updated,
        )
        self.metrics.timing("toolstash.build.duration", duration)
        self.metrics.increment("toolstash.build.completed")
        return BuildSummary(
            commit=commit,
            artifact=paths,
            cached=False,
            tip_updated=tip_updated,
            duration=duration,
        )

    def _point_tip(self, commit: CommitId) -> bool:
        """Move the tip alias to commit. Returns False if it already pointed there."""
        if self.alias.resolve() == commit:
            self.logger.debug("Tip alias unchanged", commit=commit)
            return False
        if not self.artifacts.has(commit):
            raise NotBuiltError(TIP, commit)
        self.alias.set(commit)
        return True

    def _resolve_built(self, ref: str) -> tuple[CommitId, ArtifactPaths]:
        if ref == TIP:
            commit = self.alias.resolve()
            if commit is None:
                raise TipNeverBuiltError()
        else:
            commit = self.resolver.resolve(ref)

        paths = self.artifacts.get(commit)
        if paths is None:
            raise NotBuiltError(ref, commit)
        return commit, paths

    def run(self, ref: str, args: Sequence[str]) -> int:
        """Run the cached binary for ref. Never builds."""
        commit, paths = self._resolve_built(ref)
        return self._run_artifact(commit, paths, args)

    def run_lazy(self, ref: str, args: Sequence[str]) -> int:
        """Run the binary for ref, building it first if needed."""
        if ref == TIP:
            raise TipRejectedError("run-lazy")
        summary = self.build_commit(self.resolver.resolve(ref))
        return self._run_artifact(summary.commit, summary.artifact, args)

    def _run_artifact(self, commit: CommitId, paths: ArtifactPaths, args: Sequence[str]) -> int:
        start_time = self.clock.now()

        # The checkout may have been evicted since the build; restore it and
        # relink the tools so the binary finds them where the build put them.
        tree = self.checkouts.ensure(commit)
        self.artifacts.link_into(paths, tree)

        env = dict(os.environ if self.base_env is None else self.base_env)
        if self.root_env_var:
            env[self.root_env_var] = str(tree)

        exit_code = self.runner.run(paths.binary, args, env)

        duration = self._elapsed(start_time)
        self.logger.log_operation(
            op="run",
            key=commit,
            durations={"total": duration},
            cache_hit=True,
            exit_code=exit_code,
        )
        self.metrics.timing("toolstash.run.duration", duration)
        return exit_code

    def list_builds(self) -> list[BuildListing]:
        """List cached builds, newest commit first."""
        commits = self.artifacts.list_ids()
        if commits is None:
            raise NoBuildsYetError()

        tip = self.alias.resolve()
        summaries = self.mirror.log_descending_by_commit_time(commits)
        listings = [
            BuildListing(
                commit=s.commit,
                committed_at=s.committed_at,
                subject=s.subject,
                is_tip=s.commit == tip,
            )
            for s in summaries
            if s.commit in commits
        ]

        known = {listing.commit for listing in listings}
        for commit in commits:
            if commit not in known:
                listings.append(
                    BuildListing(commit=commit, committed_at=None, subject="", is_tip=commit == tip)
                )
        return listings

    def remove(self, ref: str) -> RemoveResult:
        """Remove the artifact and checkout for ref."""
        commit, _ = self._resolve_built(ref)
        self.logger.info("Starting remove", commit=commit)

        result = RemoveResult(commit=commit)
        result.checkout_removed = self.checkouts.remove(commit)
        if self.alias.resolve() == commit:
            self.alias.clear()
            result.alias_cleared = True
        self.artifacts.remove(commit)

        self.metrics.increment("toolstash.remove.completed")
        return result

    def clear_source_cache(self) -> EvictResult:
        """Drop every checkout. Artifacts and the alias are untouched."""
        removed = self.checkouts.evict_all()
        if removed is None:
            self.logger.info("No source cache to clear")
            return EvictResult(root_present=False)

        self.logger.info("Cleared source cache", removed=len(removed))
        self.metrics.gauge("toolstash.evict.removed", len(removed))
        return EvictResult(root_present=True, removed=removed)
