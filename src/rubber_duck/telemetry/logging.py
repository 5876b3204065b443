"""Contract for outcome telemetry and the default logging sink."""

from __future__ import annotations

import logging
from typing import Protocol


class Telemetry(Protocol):
    """Receives structured outcome events as they are committed."""

    def emit(self, event_name: str, payload: dict) -> None:
        """Publish telemetry event to the configured sink."""


class LoggingTelemetry:
    """Writes each event to the ``rubber_duck.events`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("rubber_duck.events")

    def emit(self, event_name: str, payload: dict) -> None:
        self._logger.info(event_name, extra={"event": payload})


class NullTelemetry:
    def emit(self, event_name: str, payload: dict) -> None:
        return None


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
