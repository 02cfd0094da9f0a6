"""In-memory registry of user accounts."""

from __future__ import annotations

import re
import threading
from typing import Dict, List, Optional

from .errors import NotFoundError, ValidationError
from .identifiers import IdentifierGenerator, RandomIdentifierGenerator
from .logs import LogSink, NullLogSink
from .models import Clock, User, utcnow

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: object) -> bool:
    """Return ``True`` for addresses shaped like ``local@domain.tld``."""

    if not isinstance(email, str):
        return False
    return _EMAIL_PATTERN.fullmatch(email) is not None


def _normalise_email(email: str) -> str:
    return email.strip().lower()


class UserRegistry:
    """Create and look up :class:`User` records."""

    def __init__(
        self,
        *,
        ids: IdentifierGenerator | None = None,
        log: LogSink | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._ids = ids or RandomIdentifierGenerator()
        self._log = log or NullLogSink()
        self._clock = clock
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def create(self, name: str, email: str) -> User:
        if not is_valid_email(email):
            self._log.warn(f"Invalid email format: {email}")
            raise ValidationError(f"Invalid email address: {email!r}")
        cleaned_name = name.strip() if isinstance(name, str) else ""
        if not cleaned_name:
            raise ValidationError("Name must not be empty")

        normalised_email = _normalise_email(email)
        with self._lock:
            user_id = self._ids.next()
            while user_id in self._users:
                user_id = self._ids.next()
            user = User(
                id=user_id,
                name=cleaned_name,
                email=normalised_email,
                created_at=self._clock(),
            )
            self._users[user.id] = user

        self._log.info(f"User created: {user.email}", user.id)
        return user

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def require(self, user_id: str) -> User:
        user = self.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        """Return the earliest registered user with ``email``, if any."""

        wanted = _normalise_email(email)
        with self._lock:
            for user in self._users.values():
                if user.email == wanted:
                    return user
        return None

    def list(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


__all__ = ["UserRegistry", "is_valid_email"]
