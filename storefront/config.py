"""Configuration management for the storefront services."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .sessions import DEFAULT_MIN_PASSWORD_LENGTH, DEFAULT_SESSION_TTL


class ConfigurationError(RuntimeError):
    """Raised when the storefront settings cannot be loaded."""


def _env_int(value: Optional[str], default: int, name: str) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value {value!r} for {name}") from exc


def _env_str(value: Optional[str], default: Optional[str]) -> Optional[str]:
    if value is None:
        return default
    stripped = value.strip()
    return stripped or default


@dataclass(frozen=True)
class ProductSeed:
    """A product to place in the catalogue at start-up."""

    name: str
    price: Decimal
    category: str

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ProductSeed":
        """Create a :class:`ProductSeed` from raw dictionary data."""
        required_fields = {"name", "price", "category"}
        missing = required_fields - data.keys()
        if missing:
            raise ConfigurationError(f"Missing required product fields: {', '.join(sorted(missing))}")
        try:
            price = Decimal(str(data["price"]))
        except InvalidOperation as exc:
            raise ConfigurationError(f"Invalid price {data['price']!r} for product {data['name']!r}") from exc
        if not price.is_finite() or price < 0:
            raise ConfigurationError(f"Price for product {data['name']!r} must be a non-negative number")
        return ProductSeed(name=str(data["name"]), price=price, category=str(data["category"]))


@dataclass(frozen=True)
class Settings:
    session_ttl: timedelta = DEFAULT_SESSION_TTL
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH
    id_prefix: Optional[str] = None
    log_level: str = "INFO"
    seed_products: Tuple[ProductSeed, ...] = field(default_factory=tuple)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "storefront.yaml").resolve(strict=False)
    return candidate


def _read_yaml(path: Path) -> Dict[str, object]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return raw


def load_settings(
    config_path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from an optional YAML file overlaid with environment variables.

    An explicitly named file must exist; the default ``config/storefront.yaml``
    is optional.
    """
    env = os.environ if environ is None else environ
    explicit = config_path or env.get("STOREFRONT_CONFIG")
    path = resolve_config_path(explicit)

    raw: Dict[str, object] = {}
    if path.exists():
        raw = _read_yaml(path)
    elif explicit:
        raise ConfigurationError(f"Configuration file not found: {path}")

    ttl_seconds = _env_int(
        env.get("STOREFRONT_SESSION_TTL_SECONDS"),
        _env_int(_as_text(raw.get("session_ttl_seconds")), int(DEFAULT_SESSION_TTL.total_seconds()), "session_ttl_seconds"),
        "STOREFRONT_SESSION_TTL_SECONDS",
    )
    if ttl_seconds <= 0:
        raise ConfigurationError("Session TTL must be a positive number of seconds")

    min_password_length = _env_int(
        env.get("STOREFRONT_MIN_PASSWORD_LENGTH"),
        _env_int(_as_text(raw.get("min_password_length")), DEFAULT_MIN_PASSWORD_LENGTH, "min_password_length"),
        "STOREFRONT_MIN_PASSWORD_LENGTH",
    )
    if min_password_length < 1:
        raise ConfigurationError("Minimum password length must be at least 1")

    id_prefix = _env_str(env.get("STOREFRONT_ID_PREFIX"), _env_str(_as_text(raw.get("id_prefix")), None))
    log_level = (_env_str(env.get("STOREFRONT_LOG_LEVEL"), _env_str(_as_text(raw.get("log_level")), "INFO")) or "INFO").upper()

    products_raw = raw.get("products") or []
    if not isinstance(products_raw, list):
        raise ConfigurationError("The 'products' key must hold a list of products")
    seeds = []
    for item in products_raw:
        if not isinstance(item, dict):
            raise ConfigurationError("Each product entry must be a mapping")
        seeds.append(ProductSeed.from_dict(item))

    return Settings(
        session_ttl=timedelta(seconds=ttl_seconds),
        min_password_length=min_password_length,
        id_prefix=id_prefix,
        log_level=log_level,
        seed_products=tuple(seeds),
    )


def _as_text(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


__all__ = [
    "ConfigurationError",
    "ProductSeed",
    "Settings",
    "load_settings",
    "resolve_config_path",
]
