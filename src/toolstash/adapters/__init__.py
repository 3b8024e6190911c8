"""Adapters for the ports."""

from .alias_symlink import SymlinkAliasAdapter
from .artifact_fs import FsArtifactCacheAdapter
from .builder_command import CommandBuilderAdapter
from .checkout_fs import FsCheckoutCacheAdapter
from .clock_utc import UtcClockAdapter
from .git_mirror import GitMirrorAdapter
from .logger_std import StdLoggerAdapter
from .metrics_logging import LoggingMetricsAdapter
from .metrics_noop import NoopMetricsAdapter
from .runner_subprocess import SubprocessRunnerAdapter

__all__ = [
    "CommandBuilderAdapter",
    "FsArtifactCacheAdapter",
    "FsCheckoutCacheAdapter",
    "GitMirrorAdapter",
    "LoggingMetricsAdapter",
    "NoopMetricsAdapter",
    "StdLoggerAdapter",
    "SubprocessRunnerAdapter",
    "SymlinkAliasAdapter",
    "UtcClockAdapter",
]
