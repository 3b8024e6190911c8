"""External build command adapter."""

import subprocess
import sys
from collections import deque
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from ..core.errors import BuildFailedError
from ..ports import LoggerPort


class CommandBuilderAdapter:
    """Runs the toolchain's build script inside a checkout.

    Output is streamed as it is produced; the last ``tail_lines`` lines are
    kept for the error raised on failure.
    """

    def __init__(
        self,
        command: Sequence[str],
        logger: LoggerPort,
        build_dir: str = "",
        tail_lines: int = 40,
        stream: TextIO | None = None,
    ):
        if not command:
            raise ValueError("Build command must not be empty")
        self.command = list(command)
        self.logger = logger
        self.build_dir = build_dir
        self.tail_lines = tail_lines
        self.stream = stream

    def build(self, commit: str, tree: Path) -> None:
        cwd = tree / self.build_dir if self.build_dir else tree
        out = self.stream or sys.stderr
        tail: deque[str] = deque(maxlen=self.tail_lines)

        self.logger.info("Running build", commit=commit, command=" ".join(self.command))
        try:
            with subprocess.Popen(
                self.command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            ) as proc:
                if proc.stdout is not None:
                    for line in proc.stdout:
                        out.write(line)
                        tail.append(line)
                status = proc.wait()
        except OSError as e:
            raise BuildFailedError(commit, 127, str(e)) from e

        if status != 0:
            raise BuildFailedError(commit, status, "".join(tail))
