"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class OrderStatus(str, Enum):
    ORDER_PLACED = "Order Placed"
    DISPATCHED = "Dispatched"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus | None":
        try:
            return cls(value)
        except ValueError:
            return None


class StatusTone(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    DANGER = "danger"
