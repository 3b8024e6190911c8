"""External build routine port interface."""

from pathlib import Path
from typing import Protocol


class BuilderPort(Protocol):
    """Port for the toolchain's own build routine."""

    def build(self, commit: str, tree: Path) -> None:
        """Build the source tree in place. Raises BuildFailedError on failure."""
        ...
