"""Subprocess runner adapter."""

import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..ports import LoggerPort


class SubprocessRunnerAdapter:
    """Runs a binary in the foreground with inherited stdio.

    A binary killed by signal N reports ``128 + N``, as a shell would.
    """

    def __init__(self, logger: LoggerPort):
        self.logger = logger

    def run(self, binary: Path, args: Sequence[str], env: Mapping[str, str]) -> int:
        self.logger.debug("Running binary", binary=str(binary), args=" ".join(args))
        with subprocess.Popen([str(binary), *args], env=dict(env)) as proc:
            try:
                status = proc.wait()
            except KeyboardInterrupt:
                # The child shares the terminal and got the interrupt too.
                status = proc.wait()
        if status < 0:
            return 128 - status
        return status
