"""Standard library logging adapter."""

import logging
import sys
from typing import Any


def _format_fields(fields: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items())


class StdLoggerAdapter:
    """Structured logger over the standard logging module.

    Keyword fields are rendered as ``key=value`` pairs after the message.
    """

    def __init__(self, name: str = "toolstash", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
            )
            self.logger.addHandler(handler)

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if fields:
            message = f"{message} {_format_fields(fields)}"
        self.logger.log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def log_operation(
        self,
        op: str,
        key: str,
        durations: dict[str, float],
        cache_hit: bool = False,
        **kwargs: Any,
    ) -> None:
        """Log a completed operation with its timings."""
        timings = {f"{name}_s": round(value, 3) for name, value in durations.items()}
        self.info(f"{op} complete", key=key, cache_hit=cache_hit, **timings, **kwargs)
