"""Centralized configuration for toolstash."""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from .models import ArtifactLayout, Remote

DEFAULT_REMOTES = (
    Remote(name="origin", url="https://go.googlesource.com/go"),
    Remote(name="github", url="https://github.com/golang/go"),
)


def _parse_remotes(value: str) -> tuple[Remote, ...]:
    return tuple(Remote.parse(spec) for spec in value.split(",") if spec.strip())


@dataclass(slots=True)
class ToolstashConfig:
    """All toolstash configuration in one place.

    Environment variables (all optional):
        TS_HOME:        Cache home holding the mirror, checkouts and artifacts.
                        Default "~/.toolstash".
        TS_BRANCH:      Tracked upstream branch that "tip" follows. Default "master".
        TS_REMOTES:     Comma separated "name=url" remotes in preference order.
                        The first is primary, the rest are fallbacks.
        TS_BUILD_CMD:   External build command, shell-split. Default "./make.bash".
        TS_BUILD_DIR:   Directory the build runs in, relative to the checkout.
                        Default "src".
        TS_BINARY:      Built binary, relative to the checkout. Default "bin/go".
        TS_TOOL_DIRS:   Colon separated auxiliary tool directories, relative to
                        the checkout. Default "pkg/tool".
        TS_ROOT_ENV:    Variable set to the checkout path when running the binary.
                        Empty disables. Default "GOROOT".
        TS_LOG_LEVEL:   Logging level. Default "WARNING".
        TS_METRICS:     Metrics backend: "noop" (default) or "logging".
    """

    home: Path = field(default_factory=lambda: Path.home() / ".toolstash")
    branch: str = "master"
    remotes: tuple[Remote, ...] = DEFAULT_REMOTES
    build_command: tuple[str, ...] = ("./make.bash",)
    build_dir: str = "src"
    layout: ArtifactLayout = field(default_factory=ArtifactLayout)
    root_env_var: str | None = "GOROOT"
    log_level: str = "WARNING"
    metrics_type: str = "noop"
    alias_name: str = "tip"

    @property
    def mirror_dir(self) -> Path:
        return self.home / "mirror"

    @property
    def src_dir(self) -> Path:
        return self.home / "src"

    @property
    def bin_dir(self) -> Path:
        return self.home / "bin"

    @classmethod
    def from_env(cls, *, log_level: str = "WARNING") -> "ToolstashConfig":
        """Build config from environment variables + explicit overrides."""
        home = os.environ.get("TS_HOME")
        remotes = os.environ.get("TS_REMOTES")
        tool_dirs = os.environ.get("TS_TOOL_DIRS", "pkg/tool")
        root_env_var = os.environ.get("TS_ROOT_ENV", "GOROOT")
        return cls(
            home=Path(home).expanduser().absolute() if home else Path.home() / ".toolstash",
            branch=os.environ.get("TS_BRANCH", "master"),
            remotes=_parse_remotes(remotes) if remotes else DEFAULT_REMOTES,
            build_command=tuple(shlex.split(os.environ.get("TS_BUILD_CMD", "./make.bash"))),
            build_dir=os.environ.get("TS_BUILD_DIR", "src"),
            layout=ArtifactLayout(
                binary=os.environ.get("TS_BINARY", "bin/go"),
                tool_dirs=tuple(d for d in tool_dirs.split(":") if d),
            ),
            root_env_var=root_env_var or None,
            log_level=os.environ.get("TS_LOG_LEVEL", log_level),
            metrics_type=os.environ.get("TS_METRICS", "noop"),
        )
