"""
Status transition controller — the order fulfillment state machine.

Legal moves live in domain.constants.ORDER_TRANSITIONS and are checked here
before any request leaves the process. Delivered and Cancelled are terminal.

A successful change is patched into the cache immediately and followed by a
background resync; a failed one forces a resync so the cache never keeps a
change the server refused.
"""
import logging
from dataclasses import dataclass

from domain.constants import ACTION_LABELS, ORDER_TRANSITIONS, STATUS_MESSAGES, STATUS_TONES
from domain.enums import OrderStatus, StatusTone
from domain.errors import InvalidTransitionError
from exceptions import OrderServiceError
from models import Order
from services.mutation_guard import MutationGuard, mutation_guard
from services.order_repository import OrderRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a status or payment change, with the operator-facing message."""
    order: Order
    message: str


def allowed_targets(status: str) -> list[OrderStatus]:
    """Statuses reachable in one move from `status` (empty for terminal/unknown)."""
    current = OrderStatus.parse(status)
    if current is None:
        return []
    return list(ORDER_TRANSITIONS[current])


def can_transition(status: str, target: str) -> bool:
    return OrderStatus.parse(target) in allowed_targets(status)


def is_terminal(status: str) -> bool:
    return not allowed_targets(status)


def available_actions(status: str) -> list[dict]:
    """Buttons the console shows for an order in `status`."""
    return [
        {"target": t.value, "label": ACTION_LABELS[t]}
        for t in allowed_targets(status)
    ]


def status_tone(status: str) -> StatusTone:
    current = OrderStatus.parse(status)
    return STATUS_TONES.get(current, StatusTone.INFO)


class StatusController:
    """Validates and applies status transitions against the order service."""

    def __init__(self, repository: OrderRepository, guard: MutationGuard = mutation_guard):
        self.repository = repository
        self.guard = guard

    async def transition(self, order_id: str, target: str, token: str) -> MutationResult:
        """
        Move an order to `target`.

        Raises:
            NotFoundError: order not in the (refreshed) cache
            InvalidTransitionError: move not in the transition table
            MutationInFlightError: another change for this order is pending
            OrderServiceError: the order service failed or refused (cache resynced first)
        """
        order = await self.repository.require(order_id, token)

        if not can_transition(order.status, target):
            logger.info(f"Rejected transition for order {order_id}: '{order.status}' -> '{target}'")
            raise InvalidTransitionError(
                order.status,
                target,
                [t.value for t in allowed_targets(order.status)],
            )

        new_status = OrderStatus(target)
        async with self.guard.hold(order_id):
            try:
                upstream_message = await self.repository.client.set_order_status(
                    token, order_id, new_status.value
                )
            except OrderServiceError as e:
                logger.error(f"Status update failed for order {order_id} -> '{new_status.value}': {e.message}")
                await self.repository.resync_now(token)
                raise

            try:
                patched = self.repository.patch(order_id, status=new_status.value)
            except KeyError:
                # Dropped by a concurrent reload; the scheduled resync settles it
                patched = order.model_copy(update={"status": new_status.value})
            self.repository.schedule_resync(token)

        logger.info(f"Order {order_id}: '{order.status}' -> '{new_status.value}'")
        return MutationResult(
            order=patched,
            message=STATUS_MESSAGES.get(new_status) or upstream_message,
        )
