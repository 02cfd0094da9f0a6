"""HTTP API exposing the storefront facade."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .config import Settings
from .errors import AuthFailure, InvalidStateError, NotFoundError, ValidationError
from .facade import DomainFacade, build_facade
from .logs import StandardLogSink
from .models import Order, Product, SessionToken, User

logger = logging.getLogger("storefront.service")


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime


class CreateProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float
    category: str = Field(..., min_length=1, max_length=100)


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    category: str
    created_at: datetime


class ProductListResponse(BaseModel):
    products: List[ProductResponse]


class CreateOrderRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    product_ids: List[str] = Field(default_factory=list)


class OrderResponse(BaseModel):
    id: str
    user_id: str
    products: List[ProductResponse]
    total: float
    status: str
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    token: str
    user_id: str
    issued_at: datetime
    expires_at: datetime


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


def _product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=float(product.price),
        category=product.category,
        created_at=product.created_at,
    )


def _order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        products=[_product_to_response(product) for product in order.products],
        total=float(order.total),
        status=order.status.value,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _session_to_response(session: SessionToken) -> SessionResponse:
    return SessionResponse(
        token=session.token,
        user_id=session.user_id,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )


def register_api_routes(app: FastAPI, facade: DomainFacade) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    bearer_security = HTTPBearer(auto_error=False)

    def current_user(
        bearer: HTTPAuthorizationCredentials | None = Depends(bearer_security),
    ) -> User:
        if bearer is None or bearer.scheme.lower() != "bearer":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing bearer token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            user = facade.validate_token(bearer.credentials)
        except NotFoundError:
            user = None
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return user

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/users", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
    async def create_user(request: CreateUserRequest) -> UserResponse:
        try:
            user = facade.create_user(request.name, request.email)
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        logger.info("Registered user %s", user.id)
        return _user_to_response(user)

    @app.get("/v1/users/{user_id}", response_model=UserResponse)
    async def get_user(user_id: str) -> UserResponse:
        user = facade.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return _user_to_response(user)

    @app.get("/v1/users/{user_id}/orders", response_model=OrderListResponse)
    async def list_user_orders(user_id: str) -> OrderListResponse:
        if facade.get_user(user_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return OrderListResponse(
            orders=[_order_to_response(order) for order in facade.get_user_orders(user_id)]
        )

    @app.post("/v1/products", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
    async def create_product(request: CreateProductRequest) -> ProductResponse:
        try:
            product = facade.create_product(request.name, request.price, request.category)
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return _product_to_response(product)

    @app.get("/v1/products", response_model=ProductListResponse)
    async def list_products(category: Optional[str] = Query(default=None)) -> ProductListResponse:
        if category is None:
            products = facade.products.list()
        else:
            products = facade.list_products_by_category(category)
        return ProductListResponse(products=[_product_to_response(product) for product in products])

    @app.get("/v1/products/{product_id}", response_model=ProductResponse)
    async def get_product(product_id: str) -> ProductResponse:
        product = facade.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return _product_to_response(product)

    @app.post("/v1/orders", status_code=status.HTTP_201_CREATED, response_model=OrderResponse)
    async def create_order(request: CreateOrderRequest) -> OrderResponse:
        try:
            order = facade.create_order(request.user_id, request.product_ids)
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        logger.info("Order %s placed for user %s", order.id, order.user_id)
        return _order_to_response(order)

    @app.get("/v1/orders/{order_id}", response_model=OrderResponse)
    async def get_order(order_id: str) -> OrderResponse:
        order = facade.get_order(order_id)
        if order is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return _order_to_response(order)

    @app.post("/v1/orders/{order_id}/complete", response_model=OrderResponse)
    async def complete_order(order_id: str) -> OrderResponse:
        return _transition(order_id, facade.complete_order)

    @app.post("/v1/orders/{order_id}/cancel", response_model=OrderResponse)
    async def cancel_order(order_id: str) -> OrderResponse:
        return _transition(order_id, facade.cancel_order)

    def _transition(order_id: str, action) -> OrderResponse:
        try:
            order = action(order_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found") from exc
        except InvalidStateError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        return _order_to_response(order)

    @app.post("/v1/sessions", status_code=status.HTTP_201_CREATED, response_model=SessionResponse)
    async def login(request: LoginRequest) -> SessionResponse:
        try:
            session = facade.login(request.email, request.password)
        except AuthFailure as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
            ) from exc
        return _session_to_response(session)

    @app.get("/v1/sessions/current", response_model=UserResponse)
    async def current_session(user: User = Depends(current_user)) -> UserResponse:
        return _user_to_response(user)


def create_app(
    *,
    facade: DomainFacade | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the storefront."""

    app_facade = facade or build_facade(settings, log=StandardLogSink("storefront"))

    app = FastAPI(
        title="Storefront API",
        version="0.1.0",
        description="In-memory users, products, orders and sessions.",
    )
    app.state.facade = app_facade

    register_api_routes(app, app_facade)
    return app


__all__ = ["create_app", "register_api_routes"]
