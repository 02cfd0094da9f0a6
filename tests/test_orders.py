from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from storefront.errors import InvalidStateError, NotFoundError, ValidationError
from storefront.identifiers import SequentialIdentifierGenerator
from storefront.models import OrderStatus
from storefront.orders import OrderLedger
from storefront.products import ProductCatalog
from storefront.users import UserRegistry


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def ids() -> SequentialIdentifierGenerator:
    return SequentialIdentifierGenerator("id")


@pytest.fixture()
def users(ids: SequentialIdentifierGenerator) -> UserRegistry:
    return UserRegistry(ids=ids)


@pytest.fixture()
def catalog(ids: SequentialIdentifierGenerator) -> ProductCatalog:
    return ProductCatalog(ids=ids)


@pytest.fixture()
def ledger(users: UserRegistry, ids: SequentialIdentifierGenerator, clock: _Clock) -> OrderLedger:
    return OrderLedger(users, ids=ids, clock=clock)


def test_empty_order_is_pending_with_zero_total(users: UserRegistry, ledger: OrderLedger) -> None:
    user = users.create("Alice", "alice@example.com")
    order = ledger.create(user.id, [])
    assert order.total == 0
    assert order.status is OrderStatus.PENDING
    assert order.status == "pending"
    assert order.products == ()


def test_total_is_sum_of_prices(users: UserRegistry, catalog: ProductCatalog, ledger: OrderLedger) -> None:
    user = users.create("Alice", "alice@example.com")
    p1 = catalog.create("P1", 10, "a")
    p2 = catalog.create("P2", 5, "a")

    order = ledger.create(user.id, [p1, p2])

    assert order.total == 15
    assert order.products == (p1, p2)
    assert order.user_id == user.id


def test_unknown_user_creates_nothing(ids: SequentialIdentifierGenerator, ledger: OrderLedger) -> None:
    with pytest.raises(NotFoundError):
        ledger.create("ghost", [])

    assert len(ledger) == 0
    # The failed call must not have consumed an identifier.
    assert ids.next() == "id-1"
    assert ledger.get("id-1") is None


def test_products_are_snapshotted(users: UserRegistry, catalog: ProductCatalog, ledger: OrderLedger) -> None:
    user = users.create("Alice", "alice@example.com")
    basket = [catalog.create("P1", 3, "a")]
    order = ledger.create(user.id, basket)
    basket.append(catalog.create("P2", 4, "a"))
    assert len(ledger.require(order.id).products) == 1


def test_non_product_items_are_rejected(users: UserRegistry, ledger: OrderLedger) -> None:
    user = users.create("Alice", "alice@example.com")
    with pytest.raises(ValidationError):
        ledger.create(user.id, [{"price": 1}])  # type: ignore[list-item]
    assert len(ledger) == 0


@pytest.mark.parametrize("target", [OrderStatus.COMPLETED, "cancelled"])
def test_pending_orders_can_finish(
    users: UserRegistry, ledger: OrderLedger, clock: _Clock, target: object
) -> None:
    user = users.create("Alice", "alice@example.com")
    order = ledger.create(user.id, [])
    clock.now += timedelta(minutes=5)

    updated = ledger.transition(order.id, target)  # type: ignore[arg-type]

    assert updated.status == OrderStatus(target)
    assert updated.updated_at == clock.now
    assert updated.created_at == order.created_at
    assert ledger.require(order.id) == updated
    assert order.status is OrderStatus.PENDING


@pytest.mark.parametrize(
    "first, second",
    [
        (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.COMPLETED),
        (OrderStatus.COMPLETED, OrderStatus.PENDING),
        (OrderStatus.COMPLETED, OrderStatus.COMPLETED),
    ],
)
def test_finished_orders_are_final(
    users: UserRegistry, ledger: OrderLedger, first: OrderStatus, second: OrderStatus
) -> None:
    user = users.create("Alice", "alice@example.com")
    order = ledger.create(user.id, [])
    ledger.transition(order.id, first)
    with pytest.raises(InvalidStateError):
        ledger.transition(order.id, second)
    assert ledger.require(order.id).status is first


def test_pending_to_pending_is_rejected(users: UserRegistry, ledger: OrderLedger) -> None:
    user = users.create("Alice", "alice@example.com")
    order = ledger.create(user.id, [])
    with pytest.raises(InvalidStateError):
        ledger.transition(order.id, OrderStatus.PENDING)


def test_transition_errors(ledger: OrderLedger, users: UserRegistry) -> None:
    with pytest.raises(NotFoundError):
        ledger.complete("missing")
    user = users.create("Alice", "alice@example.com")
    order = ledger.create(user.id, [])
    with pytest.raises(ValidationError):
        ledger.transition(order.id, "shipped")


def test_list_for_user(users: UserRegistry, ledger: OrderLedger) -> None:
    alice = users.create("Alice", "alice@example.com")
    bob = users.create("Bob", "bob@example.com")
    first = ledger.create(alice.id, [])
    ledger.create(bob.id, [])
    second = ledger.cancel(ledger.create(alice.id, []).id)

    assert ledger.list_for_user(alice.id) == [first, second]
    assert ledger.list_for_user("nobody") == []
