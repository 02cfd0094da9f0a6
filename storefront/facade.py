"""Single entry point over the storefront domain services."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .config import Settings
from .identifiers import (
    IdentifierGenerator,
    RandomIdentifierGenerator,
    SequentialIdentifierGenerator,
)
from .logs import LogSink, NullLogSink, StandardLogSink
from .models import Clock, Order, OrderStatus, Price, Product, SessionToken, User, utcnow
from .orders import OrderLedger
from .products import ProductCatalog
from .sessions import SessionAuthority
from .users import UserRegistry


class DomainFacade:
    """Expose every domain operation through one object.

    The facade holds no state of its own. Each method forwards to one service
    and lets results and errors through untouched.
    """

    def __init__(
        self,
        *,
        users: UserRegistry,
        products: ProductCatalog,
        orders: OrderLedger,
        sessions: SessionAuthority,
    ) -> None:
        if orders.users is not users:
            raise ValueError("The order ledger must share the facade's user registry")
        self._users = users
        self._products = products
        self._orders = orders
        self._sessions = sessions

    @property
    def users(self) -> UserRegistry:
        return self._users

    @property
    def products(self) -> ProductCatalog:
        return self._products

    @property
    def orders(self) -> OrderLedger:
        return self._orders

    @property
    def sessions(self) -> SessionAuthority:
        return self._sessions

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, name: str, email: str) -> User:
        return self._users.create(name, email)

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_orders(self, user_id: str) -> List[Order]:
        return self._orders.list_for_user(user_id)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------
    def create_product(self, name: str, price: Price, category: str) -> Product:
        return self._products.create(name, price, category)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def list_products_by_category(self, category: str) -> List[Product]:
        return self._products.list_by_category(category)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def create_order(self, user_id: str, product_ids: Iterable[str]) -> Order:
        """Create an order from product ids.

        Ids that do not resolve to a product are skipped.
        """

        resolved = [self._products.get(product_id) for product_id in product_ids]
        return self._orders.create(user_id, [product for product in resolved if product is not None])

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def transition_order(self, order_id: str, status: OrderStatus | str) -> Order:
        return self._orders.transition(order_id, status)

    def complete_order(self, order_id: str) -> Order:
        return self._orders.complete(order_id)

    def cancel_order(self, order_id: str) -> Order:
        return self._orders.cancel(order_id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> SessionToken:
        return self._sessions.login(email, password)

    def validate_token(self, token: str) -> Optional[User]:
        return self._sessions.validate(token)


def build_facade(
    settings: Settings | None = None,
    *,
    log: LogSink | None = None,
    ids: IdentifierGenerator | None = None,
    clock: Clock = utcnow,
) -> DomainFacade:
    """Wire one instance of each service and return the facade over them."""

    settings = settings or Settings()
    if ids is None:
        if settings.id_prefix:
            ids = SequentialIdentifierGenerator(settings.id_prefix)
        else:
            ids = RandomIdentifierGenerator()
    sink: LogSink = log or NullLogSink()

    def component_log(name: str) -> LogSink:
        if isinstance(sink, StandardLogSink):
            return sink.child(name)
        return sink

    users = UserRegistry(ids=ids, log=component_log("users"), clock=clock)
    products = ProductCatalog(ids=ids, log=component_log("products"), clock=clock)
    orders = OrderLedger(users, ids=ids, log=component_log("orders"), clock=clock)
    sessions = SessionAuthority(
        users,
        ttl=settings.session_ttl,
        min_password_length=settings.min_password_length,
        log=component_log("sessions"),
        clock=clock,
    )

    for seed in settings.seed_products:
        products.create(seed.name, seed.price, seed.category)

    return DomainFacade(users=users, products=products, orders=orders, sessions=sessions)


__all__ = ["DomainFacade", "build_facade"]
