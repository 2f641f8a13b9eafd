"""
Payment service — guarded payment toggle for orders.

Payment may be marked collected/uncollected only while the order is not
Cancelled. Setting the same value again is allowed and still round-trips to
the order service.
"""

from __future__ import annotations

import logging

from domain.enums import OrderStatus
from domain.errors import PaymentLockedError
from exceptions import OrderServiceError
from services.mutation_guard import MutationGuard, mutation_guard
from services.order_repository import OrderRepository
from services.status_service import MutationResult

logger = logging.getLogger(__name__)


def payment_locked(status: str) -> bool:
    return status == OrderStatus.CANCELLED.value


class PaymentController:
    def __init__(self, repository: OrderRepository, guard: MutationGuard = mutation_guard):
        self.repository = repository
        self.guard = guard

    async def set_payment(self, order_id: str, paid: bool, token: str) -> MutationResult:
        """
        Mark an order's payment as collected (True) or not (False).

        Raises:
            NotFoundError: order not in the (refreshed) cache
            PaymentLockedError: order is Cancelled
            MutationInFlightError: another change for this order is pending
            OrderServiceError: the order service failed or refused (cache resynced first)
        """
        order = await self.repository.require(order_id, token)

        if payment_locked(order.status):
            logger.info(f"Rejected payment change on cancelled order {order_id}")
            raise PaymentLockedError(order_id)

        async with self.guard.hold(order_id):
            try:
                await self.repository.client.set_payment_status(token, order_id, paid)
            except OrderServiceError as e:
                logger.error(f"Payment update failed for order {order_id}: {e.message}")
                await self.repository.resync_now(token)
                raise

            try:
                patched = self.repository.patch(order_id, payment=paid)
            except KeyError:
                patched = order.model_copy(update={"payment": paid})
            self.repository.schedule_resync(token)

        logger.info(f"Order {order_id}: payment -> {'Paid' if paid else 'Unpaid'}")
        return MutationResult(
            order=patched,
            message="Payment marked as Paid" if paid else "Payment marked as Unpaid",
        )
