"""Domain models for the storefront services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Tuple, Union

Price = Union[int, float, Decimal]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    """Lifecycle state of an order."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class User:
    """A registered customer account."""

    id: str
    name: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class Product:
    """A catalogue entry. Orders embed these as snapshots."""

    id: str
    name: str
    price: Decimal
    category: str
    created_at: datetime


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    products: Tuple[Product, ...]
    total: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SessionToken:
    """A time-limited credential bound to a single user."""

    token: str
    user_id: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


__all__ = [
    "Clock",
    "Order",
    "OrderStatus",
    "Price",
    "Product",
    "SessionToken",
    "User",
    "utcnow",
]
