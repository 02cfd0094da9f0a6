"""Order ledger: records purchases and their lifecycle."""

from __future__ import annotations

import threading
from dataclasses import replace
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from .errors import InvalidStateError, NotFoundError, ValidationError
from .identifiers import IdentifierGenerator, RandomIdentifierGenerator
from .logs import LogSink, NullLogSink
from .models import Clock, Order, OrderStatus, Product, utcnow
from .users import UserRegistry

_ALLOWED_TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def _coerce_status(value: OrderStatus | str) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown order status {value!r}") from exc


class OrderLedger:
    """Owns :class:`Order` records.

    The ledger only reads from the user registry it is given; it never creates
    or changes users.
    """

    def __init__(
        self,
        users: UserRegistry,
        *,
        ids: IdentifierGenerator | None = None,
        log: LogSink | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._ids = ids or RandomIdentifierGenerator()
        self._log = log or NullLogSink()
        self._clock = clock
        self._orders: Dict[str, Order] = {}
        self._lock = threading.Lock()

    @property
    def users(self) -> UserRegistry:
        return self._users

    def create(self, user_id: str, products: Iterable[Product]) -> Order:
        """Record a pending order for ``user_id`` containing ``products``."""

        if self._users.get(user_id) is None:
            self._log.warn(f"Order rejected: user {user_id} not found")
            raise NotFoundError("User", user_id)

        snapshot = tuple(products)
        for item in snapshot:
            if not isinstance(item, Product):
                raise ValidationError("Orders may only contain Product values")
        total = sum((item.price for item in snapshot), Decimal(0))
        now = self._clock()

        with self._lock:
            order_id = self._ids.next()
            while order_id in self._orders:
                order_id = self._ids.next()
            order = Order(
                id=order_id,
                user_id=user_id,
                products=snapshot,
                total=total,
                status=OrderStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._orders[order.id] = order

        self._log.info(f"Order {order.id} created with {len(snapshot)} item(s)", user_id)
        return order

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def require(self, order_id: str) -> Order:
        order = self.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def list_for_user(self, user_id: str) -> List[Order]:
        with self._lock:
            return [order for order in self._orders.values() if order.user_id == user_id]

    def transition(self, order_id: str, new_status: OrderStatus | str) -> Order:
        """Move an order to ``new_status``.

        Only pending orders may change, and only to completed or cancelled.
        """

        target = _coerce_status(new_status)
        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                raise NotFoundError("Order", order_id)
            if target not in _ALLOWED_TRANSITIONS[current.status]:
                raise InvalidStateError(
                    f"Cannot move order {order_id} from {current.status.value} to {target.value}"
                )
            updated = replace(current, status=target, updated_at=self._clock())
            self._orders[order_id] = updated

        self._log.info(f"Order {order_id} marked {target.value}", updated.user_id)
        return updated

    def complete(self, order_id: str) -> Order:
        return self.transition(order_id, OrderStatus.COMPLETED)

    def cancel(self, order_id: str) -> Order:
        return self.transition(order_id, OrderStatus.CANCELLED)

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


__all__ = ["OrderLedger"]
