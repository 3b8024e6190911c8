"""Core domain errors.

Every error carries a message that tells the user what to run next.
"""


class ToolstashError(Exception):
    """Base error for toolstash."""


class UnknownRevisionError(ToolstashError):
    """Reference does not resolve to a commit in the mirror."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(
            f"Unknown revision: {ref!r} (run 'toolstash fetch' if it is newer than the mirror)"
        )


class MirrorUnreachableError(ToolstashError):
    """Every configured remote failed to fetch."""

    def __init__(self, branch: str, failures: dict[str, str]):
        self.branch = branch
        self.failures = failures
        detail = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(f"Could not fetch {branch!r} from any remote ({detail})")


class BuildFailedError(ToolstashError):
    """External build routine exited non-zero."""

    def __init__(self, commit: str, status: int, output: str = "", reason: str | None = None):
        self.commit = commit
        self.status = status
        self.output = output
        reason = reason or f"failed with exit status {status}"
        super().__init__(f"Build of {commit[:12]} {reason}")


class NotBuiltError(ToolstashError):
    """Operation needs an artifact that does not exist."""

    def __init__(self, ref: str, commit: str | None = None):
        self.ref = ref
        self.commit = commit
        super().__init__(f"{ref} is not built (run 'toolstash build {ref}' first)")


class TipNeverBuiltError(ToolstashError):
    """The tip alias was used before any tip build succeeded."""

    def __init__(self) -> None:
        super().__init__("tip has never been built (run 'toolstash build tip' first)")


class TipRejectedError(ToolstashError):
    """The tip sentinel is not accepted by this command."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"{command} does not accept 'tip' (run 'toolstash build tip' and then 'toolstash run tip')"
        )


class NoBuildsYetError(ToolstashError):
    """Artifact cache has never been created."""

    def __init__(self) -> None:
        super().__init__("No builds yet (run 'toolstash build <ref>' first)")


class NotFoundError(ToolstashError):
    """Cache entry not found."""


class VcsCommandError(ToolstashError):
    """A git invocation failed."""

    def __init__(self, args: list[str], status: int, stderr: str = ""):
        self.command = args
        self.status = status
        self.stderr = stderr
        message = f"git {' '.join(args)} exited with status {status}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
