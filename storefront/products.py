"""In-memory product catalogue."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Dict, List, Optional

from .errors import NotFoundError, ValidationError
from .identifiers import IdentifierGenerator, RandomIdentifierGenerator
from .logs import LogSink, NullLogSink
from .models import Clock, Price, Product, utcnow


def _normalise_price(price: object) -> Decimal:
    if isinstance(price, bool) or not isinstance(price, (int, float, Decimal)):
        raise ValidationError("Price must be a number")
    amount = Decimal(str(price)) if isinstance(price, float) else Decimal(price)
    if not amount.is_finite():
        raise ValidationError("Price must be a finite number")
    if amount < 0:
        raise ValidationError("Price must not be negative")
    return amount


def _normalise_text(value: object, field: str) -> str:
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned


def format_price(price: Price, currency: str = "USD") -> str:
    """Render ``price`` as ``$1,234.50`` style text."""

    amount = Decimal(str(price)).quantize(Decimal("0.01"))
    symbol = "$" if currency == "USD" else f"{currency} "
    return f"{symbol}{amount:,.2f}"


class ProductCatalog:
    """Create, fetch and filter :class:`Product` records."""

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
        self._products: Dict[str, Product] = {}
        self._lock = threading.Lock()

    def create(self, name: str, price: Price, category: str) -> Product:
        normalised_price = _normalise_price(price)
        cleaned_name = _normalise_text(name, "Name")
        cleaned_category = _normalise_text(category, "Category")

        with self._lock:
            product_id = self._ids.next()
            while product_id in self._products:
                product_id = self._ids.next()
            product = Product(
                id=product_id,
                name=cleaned_name,
                price=normalised_price,
                category=cleaned_category,
                created_at=self._clock(),
            )
            self._products[product.id] = product

        self._log.debug(f"Product {product.id} added to category {product.category}")
        return product

    def get(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def require(self, product_id: str) -> Product:
        product = self.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def list_by_category(self, category: str) -> List[Product]:
        with self._lock:
            return [product for product in self._products.values() if product.category == category]

    def list(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)


__all__ = ["ProductCatalog", "format_price"]
