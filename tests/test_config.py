"""Tests for configuration and the small model helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from toolstash.core.config import DEFAULT_REMOTES, ToolstashConfig
from toolstash.core.models import ArtifactLayout, Remote, is_commit_id, short_id

ENV_VARS = (
    "TS_HOME",
    "TS_BRANCH",
    "TS_REMOTES",
    "TS_BUILD_CMD",
    "TS_BUILD_DIR",
    "TS_BINARY",
    "TS_TOOL_DIRS",
    "TS_ROOT_ENV",
    "TS_LOG_LEVEL",
    "TS_METRICS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestRemote:
    def test_parse(self) -> None:
        assert Remote.parse(" origin = https://example.invalid/go ") == Remote(
            "origin", "https://example.invalid/go"
        )

    def test_parse_keeps_equals_in_url(self) -> None:
        assert Remote.parse("mirror=https://host/repo?a=b").url == "https://host/repo?a=b"

    @pytest.mark.parametrize("spec", ["origin", "=https://host", "origin="])
    def test_parse_rejects_malformed(self, spec: str) -> None:
        with pytest.raises(ValueError, match="name=url"):
            Remote.parse(spec)


class TestCommitIds:
    def test_full_ids(self) -> None:
        assert is_commit_id("a" * 40)
        assert is_commit_id("0123456789abcdef" * 4)

    def test_rejects_short_and_uppercase(self) -> None:
        assert not is_commit_id("abc123")
        assert not is_commit_id("A" * 40)
        assert not is_commit_id("tip")

    def test_short_id(self) -> None:
        assert short_id("0123456789abcdef" * 4) == "0123456789ab"


class TestFromEnv:
    def test_defaults(self) -> None:
        config = ToolstashConfig.from_env()

        assert config.home == Path.home() / ".toolstash"
        assert config.branch == "master"
        assert config.remotes == DEFAULT_REMOTES
        assert config.remotes[0].name == "origin"
        assert config.build_command == ("./make.bash",)
        assert config.build_dir == "src"
        assert config.layout == ArtifactLayout()
        assert config.root_env_var == "GOROOT"
        assert config.log_level == "WARNING"
        assert config.metrics_type == "noop"

    def test_directories_under_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("TS_HOME", str(tmp_path / "cache"))

        config = ToolstashConfig.from_env()

        assert config.mirror_dir == tmp_path / "cache" / "mirror"
        assert config.src_dir == tmp_path / "cache" / "src"
        assert config.bin_dir == tmp_path / "cache" / "bin"

    def test_relative_home_is_made_absolute(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TS_HOME", "cache")

        assert ToolstashConfig.from_env().home == tmp_path / "cache"

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TS_BRANCH", "main")
        monkeypatch.setenv("TS_REMOTES", "gh=https://github.com/ziglang/zig, cb=https://codeberg.org/ziglang/zig")
        monkeypatch.setenv("TS_BUILD_CMD", "zig build -Doptimize='ReleaseFast'")
        monkeypatch.setenv("TS_BUILD_DIR", "")
        monkeypatch.setenv("TS_BINARY", "zig-out/bin/zig")
        monkeypatch.setenv("TS_TOOL_DIRS", "zig-out/lib:zig-out/doc")
        monkeypatch.setenv("TS_ROOT_ENV", "")
        monkeypatch.setenv("TS_METRICS", "logging")

        config = ToolstashConfig.from_env(log_level="DEBUG")

        assert config.branch == "main"
        assert [r.name for r in config.remotes] == ["gh", "cb"]
        assert config.build_command == ("zig", "build", "-Doptimize=ReleaseFast")
        assert config.build_dir == ""
        assert config.layout.paths() == ("zig-out/bin/zig", "zig-out/lib", "zig-out/doc")
        assert config.root_env_var is None
        assert config.log_level == "DEBUG"
        assert config.metrics_type == "logging"

    def test_log_level_from_env_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TS_LOG_LEVEL", "INFO")

        assert ToolstashConfig.from_env(log_level="DEBUG").log_level == "INFO"

    def test_bad_remote_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TS_REMOTES", "not-a-remote")

        with pytest.raises(ValueError):
            ToolstashConfig.from_env()
