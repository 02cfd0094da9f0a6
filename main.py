"""Command-line interface for the storefront services."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

from storefront.config import ConfigurationError, Settings, load_settings
from storefront.errors import DomainError
from storefront.facade import DomainFacade, build_facade
from storefront.logs import StandardLogSink
from storefront.products import format_price
from storefront.users import is_valid_email

logger = logging.getLogger("storefront.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Storefront domain service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP API (default: 8000)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML settings file (default: STOREFRONT_CONFIG or config/storefront.yaml)",
    )

    demo_parser = subparsers.add_parser(
        "demo", help="Run a sample workflow against an in-memory facade"
    )
    demo_parser.add_argument("--config", default=None, help="Path to a YAML settings file")
    demo_parser.add_argument(
        "--email",
        default="demo@example.com",
        help="Email address used for the demo account",
    )

    check_parser = subparsers.add_parser("check-email", help="Validate an email address")
    check_parser.add_argument("email", help="Address to validate")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "demo", "check-email"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_settings(config_path: str | None) -> Settings:
    try:
        return load_settings(config_path)
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _serve(*, settings: Settings, host: str, port: int) -> None:
    from storefront.service import create_app
    import uvicorn

    logger.info("Starting storefront API on http://%s:%s", host, port)
    facade = build_facade(settings, log=StandardLogSink("storefront"))
    app = create_app(facade=facade)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def _run_demo(facade: DomainFacade, *, email: str) -> int:
    """Exercise each facade operation once and print what happened."""

    try:
        user = facade.create_user("Demo User", email)
        print(f"Created user {user.id}: {user.name} <{user.email}>")

        if not facade.products.list():
            facade.create_product("Notebook", 4.5, "stationery")
            facade.create_product("Fountain pen", 25, "stationery")
            facade.create_product("Desk lamp", 39.99, "furniture")

        products = facade.products.list()
        print(f"{len(products)} product(s) in the catalogue:")
        for product in products:
            print(f"  {product.id:<24}  {product.name:<24}  {format_price(product.price):>10}  {product.category}")

        order = facade.create_order(user.id, [product.id for product in products[:2]] + ["missing"])
        print(f"Order {order.id} ({order.status.value}) total {format_price(order.total)}")

        session = facade.login(email, "demo-password")
        print(f"Issued session token expiring at {session.expires_at.isoformat()}")

        resolved = facade.validate_token(session.token)
        print(f"Token resolves to {resolved.email if resolved else '<nobody>'}")

        completed = facade.complete_order(order.id)
        print(f"Order {completed.id} is now {completed.status.value}")
    except DomainError as exc:
        print(f"Demo failed: {exc}")
        return 1
    return 0


def _check_email(email: str) -> int:
    if is_valid_email(email):
        print(f"{email} is a valid address.")
        return 0
    print(f"{email} is not a valid address.")
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "check-email":
        return _check_email(args.email)

    settings = _load_settings(getattr(args, "config", None))
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.command == "serve":
        _serve(settings=settings, host=args.host, port=args.port)
    elif args.command == "demo":
        facade = build_facade(settings, log=StandardLogSink("storefront"))
        return _run_demo(facade, email=args.email)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
