"""Session issuing and validation behaviour."""

from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from storefront.errors import AuthFailure, NotFoundError
from storefront.logs import MemoryLogSink
from storefront.sessions import SessionAuthority
from storefront.users import UserRegistry


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class SessionAuthorityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.log = MemoryLogSink()
        self.users = UserRegistry(clock=self.clock)
        self.authority = SessionAuthority(self.users, log=self.log, clock=self.clock)
        self.user = self.users.create("Xavier", "x@y.com")

    def test_short_password_is_rejected(self) -> None:
        with self.assertRaises(AuthFailure):
            self.authority.login("x@y.com", "short")
        self.assertEqual(self.authority.active_count(), 0)

    def test_empty_email_is_rejected(self) -> None:
        with self.assertRaises(AuthFailure):
            self.authority.login("", "longenough")

    def test_unknown_email_fails_like_bad_password(self) -> None:
        with self.assertRaises(AuthFailure) as unknown:
            self.authority.login("nobody@y.com", "longenough")
        with self.assertRaises(AuthFailure) as short:
            self.authority.login("x@y.com", "short")
        self.assertEqual(str(unknown.exception), str(short.exception))

    def test_login_binds_token_to_registered_user(self) -> None:
        session = self.authority.login("X@Y.com", "longenough")

        self.assertEqual(session.user_id, self.user.id)
        self.assertEqual(session.issued_at, self.clock.now)
        self.assertEqual(session.expires_at, self.clock.now + timedelta(hours=1))
        self.assertEqual(self.authority.validate(session.token), self.user)

    def test_token_expires_after_ttl(self) -> None:
        session = self.authority.login("x@y.com", "longenough")

        self.clock.advance(minutes=59, seconds=59)
        self.assertEqual(self.authority.validate(session.token), self.user)

        self.clock.advance(seconds=1)
        self.assertIsNone(self.authority.validate(session.token))
        self.assertEqual(self.authority.active_count(), 0)

    def test_issue_sweeps_expired_tokens(self) -> None:
        stale = [self.authority.issue(self.user) for _ in range(3)]
        self.clock.advance(hours=1)

        fresh = self.authority.issue(self.user)

        self.assertEqual(len(self.authority), 1)
        for session in stale:
            self.assertIsNone(self.authority.validate(session.token))
        self.assertEqual(self.authority.validate(fresh.token), self.user)

    def test_unknown_token_is_invalid(self) -> None:
        self.assertIsNone(self.authority.validate("not-a-token"))
        self.assertIn("Invalid or expired token", self.log.messages("warn"))

    def test_tokens_are_unique(self) -> None:
        tokens = {self.authority.issue(self.user).token for _ in range(100)}
        self.assertEqual(len(tokens), 100)
        self.assertEqual(self.authority.active_count(), 100)

    def test_vanished_user_raises_not_found(self) -> None:
        other_registry = UserRegistry()
        stranger = other_registry.create("Stranger", "s@example.com")
        session = self.authority.issue(stranger)

        with self.assertRaises(NotFoundError):
            self.authority.validate(session.token)

    def test_custom_policy(self) -> None:
        strict = SessionAuthority(
            self.users,
            ttl=timedelta(minutes=5),
            min_password_length=12,
            clock=self.clock,
        )
        with self.assertRaises(AuthFailure):
            strict.login("x@y.com", "longenough")
        session = strict.login("x@y.com", "longer-password")
        self.assertEqual(session.expires_at - session.issued_at, timedelta(minutes=5))

    def test_ttl_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            SessionAuthority(self.users, ttl=timedelta(0))

    def test_login_attempts_are_logged(self) -> None:
        with self.assertRaises(AuthFailure):
            self.authority.login("x@y.com", "nope")
        self.authority.login("x@y.com", "longenough")

        self.assertEqual(
            self.log.messages("info")[-2:],
            ["Login attempt for email: x@y.com", "User authenticated"],
        )
        self.assertEqual(self.log.messages("warn"), ["Authentication failed for email: x@y.com"])
        self.assertEqual(self.log.entries("info")[-1].user_id, self.user.id)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
