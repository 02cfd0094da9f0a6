"""In-memory session tokens for authenticated storefront users."""

from __future__ import annotations

import secrets
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional

from .errors import AuthFailure, NotFoundError
from .logs import LogSink, NullLogSink
from .models import Clock, SessionToken, User, utcnow
from .users import UserRegistry

DEFAULT_SESSION_TTL = timedelta(hours=1)
DEFAULT_MIN_PASSWORD_LENGTH = 6


class SessionAuthority:
    """Issue, validate and expire session tokens."""

    def __init__(
        self,
        users: UserRegistry,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
        log: LogSink | None = None,
        clock: Clock = utcnow,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive")
        self._users = users
        self._ttl = ttl
        self._min_password_length = min_password_length
        self._log = log or NullLogSink()
        self._clock = clock
        self._tokens: Dict[str, SessionToken] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def login(self, email: str, password: str) -> SessionToken:
        """Check credentials and issue a token for the matching user.

        The credential rule is a placeholder: a non-empty email and a password
        of at least ``min_password_length`` characters.
        """

        self._log.info(f"Login attempt for email: {email}")
        user: Optional[User] = None
        if (
            isinstance(email, str)
            and email.strip()
            and isinstance(password, str)
            and len(password) >= self._min_password_length
        ):
            user = self._users.find_by_email(email)
        if user is None:
            self._log.warn(f"Authentication failed for email: {email}")
            raise AuthFailure()
        return self.issue(user)

    def issue(self, user: User) -> SessionToken:
        """Bind a fresh token to an already authenticated ``user``."""

        now = self._clock()
        with self._lock:
            self._prune_expired_locked(now)
            token = secrets.token_urlsafe(32)
            while token in self._tokens:
                token = secrets.token_urlsafe(32)
            record = SessionToken(
                token=token,
                user_id=user.id,
                issued_at=now,
                expires_at=now + self._ttl,
            )
            self._tokens[token] = record
        self._log.info("User authenticated", user.id)
        return record

    def validate(self, token: str) -> Optional[User]:
        """Return the user behind ``token``, or ``None`` if it is unknown or expired."""

        now = self._clock()
        with self._lock:
            record = self._tokens.get(token)
            if record is not None and record.is_expired(now):
                self._tokens.pop(token, None)
                record = None
        if record is None:
            self._log.warn("Invalid or expired token")
            return None

        user = self._users.get(record.user_id)
        if user is None:
            self._log.error("Session refers to a missing user", record.user_id)
            raise NotFoundError("User", record.user_id)
        self._log.debug("Token validated", user.id)
        return user

    def _prune_expired_locked(self, now: datetime) -> None:
        expired = [token for token, record in self._tokens.items() if record.is_expired(now)]
        for token in expired:
            del self._tokens[token]

    def active_count(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for record in self._tokens.values() if not record.is_expired(now))

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


__all__ = ["DEFAULT_MIN_PASSWORD_LENGTH", "DEFAULT_SESSION_TTL", "SessionAuthority"]
