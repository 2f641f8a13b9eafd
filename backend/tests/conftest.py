"""
Pytest configuration and shared fixtures for the admin console tests.

Provides an order service fake, a real OrderServiceClient wired to it, a
fresh repository/guard per test, and the two mutation controllers.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator

from order_client import OrderServiceClient
from services.mutation_guard import MutationGuard
from services.order_repository import OrderRepository
from services.payment_service import PaymentController
from services.status_service import StatusController
from tests.fakes import TOKEN, FakeOrderService, make_client, make_order


# ── Order Service Fixtures ───────────────────────────────────────────


@pytest.fixture
def sample_orders() -> list[dict]:
    """Oldest first: o-1 placed, o-2 cancelled, o-3 delivered + prepaid."""
    return [
        make_order("o-1"),
        make_order("o-2", status="Cancelled"),
        make_order("o-3", status="Delivered", payment=True, paymentMethod="Razorpay"),
    ]


@pytest.fixture
def fake_service(sample_orders) -> FakeOrderService:
    return FakeOrderService(sample_orders)


@pytest_asyncio.fixture
async def order_client(fake_service) -> AsyncGenerator[OrderServiceClient, None]:
    client = make_client(fake_service)
    yield client
    await client.close()


# ── Repository / Controller Fixtures ─────────────────────────────────


@pytest_asyncio.fixture
async def repository(order_client) -> AsyncGenerator[OrderRepository, None]:
    """Empty cache; resyncs run immediately instead of after a delay."""
    repo = OrderRepository(order_client, resync_delay=0)
    yield repo
    await repo.close()


@pytest_asyncio.fixture
async def loaded_repository(repository) -> OrderRepository:
    await repository.refresh(TOKEN)
    return repository


@pytest.fixture
def guard() -> MutationGuard:
    return MutationGuard()


@pytest.fixture
def status_controller(loaded_repository, guard) -> StatusController:
    return StatusController(loaded_repository, guard)


@pytest.fixture
def payment_controller(loaded_repository, guard) -> PaymentController:
    return PaymentController(loaded_repository, guard)
