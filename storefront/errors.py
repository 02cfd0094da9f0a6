"""Error taxonomy shared by the storefront domain services."""
from __future__ import annotations


class DomainError(Exception):
    """Base class for failures reported by the domain services."""


class ValidationError(DomainError, ValueError):
    """Raised when caller supplied input is malformed."""


class NotFoundError(DomainError, LookupError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} {identifier!r} not found")
        self.kind = kind
        self.identifier = identifier


class AuthFailure(DomainError, PermissionError):
    """Raised when a credential check fails.

    The message never says which part of the check failed.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class InvalidStateError(DomainError, RuntimeError):
    """Raised when an entity cannot move to the requested state."""


__all__ = [
    "AuthFailure",
    "DomainError",
    "InvalidStateError",
    "NotFoundError",
    "ValidationError",
]
