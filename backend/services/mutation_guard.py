"""
Per-order in-flight registry.

Status and payment changes for the same order never overlap: a second
request arriving while the first is still waiting on the order service is
rejected instead of queued. Different orders are independent.
"""
import logging
from contextlib import asynccontextmanager

from domain.errors import MutationInFlightError

logger = logging.getLogger(__name__)


class MutationGuard:
    def __init__(self):
        self._in_flight: set[str] = set()

    def is_busy(self, order_id: str) -> bool:
        return order_id in self._in_flight

    @asynccontextmanager
    async def hold(self, order_id: str):
        """
        Claim an order for the duration of one mutation.

        Raises:
            MutationInFlightError: if the order is already claimed
        """
        if order_id in self._in_flight:
            logger.warning(f"Rejected overlapping update for order {order_id}")
            raise MutationInFlightError(order_id)
        self._in_flight.add(order_id)
        try:
            yield
        finally:
            self._in_flight.discard(order_id)


# Shared by the status and payment controllers
mutation_guard = MutationGuard()
