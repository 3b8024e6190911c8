"""Metrics adapter that writes to the log."""

import logging


class LoggingMetricsAdapter:
    """Emits each metric as a debug log line."""

    def __init__(self, name: str = "toolstash.metrics"):
        self.logger = logging.getLogger(name)

    def _emit(self, kind: str, name: str, value: float, tags: dict[str, str] | None) -> None:
        suffix = f" {tags}" if tags else ""
        self.logger.debug("%s %s=%s%s", kind, name, value, suffix)

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self._emit("counter", name, value, tags)

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._emit("gauge", name, value, tags)

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._emit("timing", name, round(value, 3), tags)
