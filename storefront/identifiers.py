"""Sources of opaque identifiers for newly created entities."""

from __future__ import annotations

import itertools
import secrets
import threading
from typing import Protocol


class IdentifierGenerator(Protocol):
    def next(self) -> str:
        ...


class RandomIdentifierGenerator:
    """Collision-resistant identifiers backed by :mod:`secrets`."""

    def __init__(self, *, nbytes: int = 12) -> None:
        if nbytes < 8:
            raise ValueError("Identifiers need at least 8 bytes of entropy")
        self._nbytes = nbytes

    def next(self) -> str:
        return secrets.token_urlsafe(self._nbytes)


class SequentialIdentifierGenerator:
    """Predictable ``<prefix>-<n>`` identifiers for demos and tests."""

    def __init__(self, prefix: str = "id", *, start: int = 1) -> None:
        cleaned = prefix.strip()
        if not cleaned:
            raise ValueError("Identifier prefix must not be empty")
        self._prefix = cleaned
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def next(self) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{self._prefix}-{value}"


__all__ = [
    "IdentifierGenerator",
    "RandomIdentifierGenerator",
    "SequentialIdentifierGenerator",
]
