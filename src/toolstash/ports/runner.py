"""Process runner port interface."""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol


class RunnerPort(Protocol):
    """Port for invoking a cached binary."""

    def run(self, binary: Path, args: Sequence[str], env: Mapping[str, str]) -> int:
        """Run binary with inherited stdio and return its exit code."""
        ...
