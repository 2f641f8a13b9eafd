"""
Shared FastAPI dependencies.

Routers import the order repository, controllers, view state and renderer
from here so tests can swap them through app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import Depends

from services.mutation_guard import mutation_guard
from services.order_repository import OrderRepository, repository
from services.order_view import OrderView
from services.payment_service import PaymentController
from services.status_service import StatusController
from services.waybill_service import DocumentRenderer, JsonLayoutRenderer

_order_view = OrderView()
_renderer = JsonLayoutRenderer()


def get_repository() -> OrderRepository:
    return repository


def get_status_controller(
    repo: OrderRepository = Depends(get_repository),
) -> StatusController:
    return StatusController(repo, mutation_guard)


def get_payment_controller(
    repo: OrderRepository = Depends(get_repository),
) -> PaymentController:
    return PaymentController(repo, mutation_guard)


def get_order_view() -> OrderView:
    """Single-operator console: one shared tab/page state."""
    return _order_view


def get_renderer() -> DocumentRenderer:
    return _renderer
