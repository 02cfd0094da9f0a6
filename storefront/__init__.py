"""In-memory storefront domain services: users, products, orders and sessions."""

from __future__ import annotations

from typing import Any

from .errors import AuthFailure, DomainError, InvalidStateError, NotFoundError, ValidationError
from .facade import DomainFacade, build_facade
from .models import Order, OrderStatus, Product, SessionToken, User


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "AuthFailure",
    "DomainError",
    "DomainFacade",
    "InvalidStateError",
    "NotFoundError",
    "Order",
    "OrderStatus",
    "Product",
    "SessionToken",
    "User",
    "ValidationError",
    "build_facade",
    "create_app",
]
