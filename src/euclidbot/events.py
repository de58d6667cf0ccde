"""Structured event stream consumed by the presentation layer.

The pipeline never prints. It emits ``Event`` objects with one of six levels
and pushes a ``BatchSnapshot`` after every completed transaction. The CLI
uses ``LoggingEventSink``; tests use ``RecordingEventSink``.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from euclidbot.swap.state import BatchSnapshot

logger = logging.getLogger(__name__)


class EventLevel(str, Enum):
    """Event severity / display category."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SUCCESS = "success"
    LOADING = "loading"
    STEP = "step"


# Display markers used by the terminal sink
MARKERS = {
    EventLevel.INFO: "[✓]",
    EventLevel.WARN: "[⚠]",
    EventLevel.ERROR: "[✗]",
    EventLevel.SUCCESS: "[✅]",
    EventLevel.LOADING: "[⟳]",
    EventLevel.STEP: "[➤]",
}

_LOG_LEVELS = {
    EventLevel.INFO: logging.INFO,
    EventLevel.WARN: logging.WARNING,
    EventLevel.ERROR: logging.ERROR,
    EventLevel.SUCCESS: logging.INFO,
    EventLevel.LOADING: logging.INFO,
    EventLevel.STEP: logging.INFO,
}


@dataclass(frozen=True)
class Event:
    """A single log event."""

    level: EventLevel
    message: str
    timestamp: float = field(default_factory=time.time)

    def render(self) -> str:
        return f"{MARKERS[self.level]} {self.message}"


class EventSink(ABC):
    """Receiver of pipeline events.

    Subclasses override ``emit`` and optionally ``progress``. The helper
    methods exist so call sites read like ``events.step("...")``.
    """

    @abstractmethod
    def emit(self, event: Event) -> None:
        pass

    def progress(self, snapshot: "BatchSnapshot") -> None:
        """Called after each completed transaction."""
        pass

    def _log(self, level: EventLevel, message: str) -> None:
        self.emit(Event(level=level, message=message))

    def info(self, message: str) -> None:
        self._log(EventLevel.INFO, message)

    def warn(self, message: str) -> None:
        self._log(EventLevel.WARN, message)

    def error(self, message: str) -> None:
        self._log(EventLevel.ERROR, message)

    def success(self, message: str) -> None:
        self._log(EventLevel.SUCCESS, message)

    def loading(self, message: str) -> None:
        self._log(EventLevel.LOADING, message)

    def step(self, message: str) -> None:
        self._log(EventLevel.STEP, message)


class LoggingEventSink(EventSink):
    """Forwards events to the standard logging module."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logging.getLogger("euclidbot")

    def emit(self, event: Event) -> None:
        self.log.log(_LOG_LEVELS[event.level], event.render())

    def progress(self, snapshot: "BatchSnapshot") -> None:
        self.log.debug(
            f"Progress: {snapshot.completed}/{snapshot.total} "
            f"(ok={snapshot.succeeded}, failed={snapshot.failed}, skipped={snapshot.skipped})"
        )


class RecordingEventSink(EventSink):
    """Keeps every event in memory (tests, headless runs)."""

    def __init__(self):
        self.events: list[Event] = []
        self.snapshots: list["BatchSnapshot"] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def progress(self, snapshot: "BatchSnapshot") -> None:
        self.snapshots.append(snapshot)

    def messages(self, level: Optional[EventLevel] = None) -> list[str]:
        """Messages, optionally filtered by level."""
        return [e.message for e in self.events if level is None or e.level == level]
