"""Logging capabilities injected into the domain services."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol

LEVELS = ("info", "warn", "error", "debug")


class LogSink(Protocol):
    def info(self, message: str, user_id: Optional[str] = None) -> None:
        ...

    def warn(self, message: str, user_id: Optional[str] = None) -> None:
        ...

    def error(self, message: str, user_id: Optional[str] = None) -> None:
        ...

    def debug(self, message: str, user_id: Optional[str] = None) -> None:
        ...


class NullLogSink:
    """Discards every message."""

    def info(self, message: str, user_id: Optional[str] = None) -> None:
        return None

    def warn(self, message: str, user_id: Optional[str] = None) -> None:
        return None

    def error(self, message: str, user_id: Optional[str] = None) -> None:
        return None

    def debug(self, message: str, user_id: Optional[str] = None) -> None:
        return None


class StandardLogSink:
    """Forward messages to a :mod:`logging` logger."""

    def __init__(self, logger: logging.Logger | str = "storefront") -> None:
        if isinstance(logger, str):
            logger = logging.getLogger(logger)
        self._logger = logger

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def child(self, suffix: str) -> "StandardLogSink":
        """Return a sink writing to ``<logger>.<suffix>``."""

        return StandardLogSink(self._logger.getChild(suffix))

    def info(self, message: str, user_id: Optional[str] = None) -> None:
        self._emit(logging.INFO, message, user_id)

    def warn(self, message: str, user_id: Optional[str] = None) -> None:
        self._emit(logging.WARNING, message, user_id)

    def error(self, message: str, user_id: Optional[str] = None) -> None:
        self._emit(logging.ERROR, message, user_id)

    def debug(self, message: str, user_id: Optional[str] = None) -> None:
        self._emit(logging.DEBUG, message, user_id)

    def _emit(self, level: int, message: str, user_id: Optional[str]) -> None:
        if user_id is None:
            self._logger.log(level, "%s", message, extra={"user_id": None})
        else:
            self._logger.log(level, "%s (user=%s)", message, user_id, extra={"user_id": user_id})


@dataclass(frozen=True)
class LogEntry:
    level: str
    message: str
    timestamp: datetime
    user_id: Optional[str] = None


class MemoryLogSink:
    """Keep log entries in memory so they can be inspected later."""

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()

    def info(self, message: str, user_id: Optional[str] = None) -> None:
        self._record("info", message, user_id)

    def warn(self, message: str, user_id: Optional[str] = None) -> None:
        self._record("warn", message, user_id)

    def error(self, message: str, user_id: Optional[str] = None) -> None:
        self._record("error", message, user_id)

    def debug(self, message: str, user_id: Optional[str] = None) -> None:
        self._record("debug", message, user_id)

    def entries(self, level: Optional[str] = None) -> List[LogEntry]:
        """Return recorded entries, optionally restricted to one level."""

        if level is not None and level not in LEVELS:
            raise ValueError(f"Unknown log level {level!r}")
        with self._lock:
            if level is None:
                return list(self._entries)
            return [entry for entry in self._entries if entry.level == level]

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [entry.message for entry in self.entries(level)]

    def _record(self, level: str, message: str, user_id: Optional[str]) -> None:
        entry = LogEntry(
            level=level,
            message=message,
            timestamp=datetime.now(timezone.utc),
            user_id=user_id,
        )
        with self._lock:
            self._entries.append(entry)


__all__ = [
    "LEVELS",
    "LogEntry",
    "LogSink",
    "MemoryLogSink",
    "NullLogSink",
    "StandardLogSink",
]
