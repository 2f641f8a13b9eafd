"""
Order repository — process-local cache of the order service's order list.

The cache is owned here and only changed through refresh() (authoritative
reload) and patch() (optimistic local change after a successful mutation).
After a patch, schedule_resync() reloads in the background so the cache
converges on server state; a failed mutation calls resync_now() instead.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config import settings
from domain.errors import NotFoundError
from exceptions import OrderServiceError
from models import Order
from order_client import OrderServiceClient, order_client

logger = logging.getLogger(__name__)


class OrderRepository:
    """Cached, newest-first view of every order visible to the operator."""

    def __init__(self, client: OrderServiceClient, resync_delay: float = 1.0):
        self._client = client
        self._resync_delay = resync_delay
        self._orders: list[Order] = []
        self._loaded = False
        self._resync_task: Optional[asyncio.Task] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def client(self) -> OrderServiceClient:
        return self._client

    @property
    def loaded(self) -> bool:
        return self._loaded

    def list(self) -> list[Order]:
        """Snapshot of the cached orders (callers may not mutate the cache)."""
        return list(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    async def refresh(self, token: str) -> list[Order]:
        """Reload from the order service, replacing the cache."""
        async with self._refresh_lock:
            orders = await self._client.list_orders(token)
            self._orders = orders
            self._loaded = True
        logger.info(f"Order cache refreshed ({len(orders)} orders)")
        return self.list()

    async def require(self, order_id: str, token: str) -> Order:
        """
        Cached order by id, reloading once when it is missing.

        Raises:
            NotFoundError: if the order service does not know the order either
        """
        order = self.get(order_id)
        if order is None:
            await self.refresh(token)
            order = self.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def ensure_loaded(self, token: str) -> list[Order]:
        if not self._loaded:
            return await self.refresh(token)
        return self.list()

    def patch(self, order_id: str, **fields) -> Order:
        """
        Apply an optimistic change to one cached order.

        Raises:
            KeyError: if the order is not cached
        """
        for i, order in enumerate(self._orders):
            if order.id == order_id:
                patched = order.model_copy(update=fields)
                self._orders[i] = patched
                logger.debug(f"Patched order {order_id}: {fields}")
                return patched
        raise KeyError(order_id)

    async def resync_now(self, token: str) -> bool:
        """Forced reload after a failed mutation. Never raises; returns success."""
        self._cancel_pending_resync()
        try:
            await self.refresh(token)
            return True
        except OrderServiceError as e:
            logger.error(f"Forced resync failed, cache may be stale: {e.message}")
            return False

    def schedule_resync(self, token: str) -> None:
        """Reload in the background after a short delay. A newer call replaces a pending one."""
        self._cancel_pending_resync()
        self._resync_task = asyncio.create_task(self._delayed_resync(token))

    async def _delayed_resync(self, token: str) -> None:
        try:
            await asyncio.sleep(self._resync_delay)
            await self.refresh(token)
        except asyncio.CancelledError:
            raise
        except OrderServiceError as e:
            logger.warning(f"Background resync failed: {e.message}")

    def _cancel_pending_resync(self) -> None:
        task = self._resync_task
        if task and not task.done():
            task.cancel()
        self._resync_task = None

    async def wait_for_resync(self) -> None:
        """Wait for the pending background resync, if any (used on shutdown and in tests)."""
        task = self._resync_task
        if task and not task.done():
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        task = self._resync_task
        self._cancel_pending_resync()
        if task and not task.done():
            try:
                await task
            except asyncio.CancelledError:
                pass


# Global repository instance
repository = OrderRepository(order_client, resync_delay=settings.resync_delay_seconds)
