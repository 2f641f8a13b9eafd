"""
Order view — status tabs, fixed-size pages and the console's order cards.

visible() never raises for a bad page number: pages clamp into range and an
empty filter yields a single empty page.
"""
import logging
import math
from dataclasses import dataclass, field

from config import settings
from domain.constants import STATUS_TABS
from domain.enums import OrderStatus
from domain.errors import ValidationError
from models import Order
from services.invoice_service import money_str
from services.payment_service import payment_locked
from services.status_service import available_actions, status_tone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    items: list[Order]
    page: int
    page_size: int
    total_pages: int
    total: int


def visible(orders: list[Order], status: str, page: int, page_size: int) -> Page:
    """Orders in `status`, sliced to one clamped page."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    matching = [o for o in orders if o.status == status]
    total_pages = max(1, math.ceil(len(matching) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=matching[start:start + page_size],
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total=len(matching),
    )


@dataclass
class OrderView:
    """
    The operator's current tab and page.

    Switching to a different status always goes back to page 1.
    """
    active_status: str = OrderStatus.ORDER_PLACED.value
    page: int = 1
    page_size: int = field(default_factory=lambda: settings.orders_page_size)

    def select_status(self, status: str) -> None:
        if OrderStatus.parse(status) is None:
            raise ValidationError(f"Unknown status '{status}'", field="status")
        if status != self.active_status:
            self.active_status = status
            self.page = 1

    def go_to(self, page: int) -> None:
        self.page = page

    def show(self, orders: list[Order], status: str | None = None, page: int | None = None) -> Page:
        """Apply an optional tab/page request, then return the visible page."""
        if status is not None and status != self.active_status:
            self.select_status(status)
        elif page is not None:
            self.go_to(page)
        result = visible(orders, self.active_status, self.page, self.page_size)
        # Remember the clamped page so "next" works from where the operator is
        self.page = result.page
        return result


# ── Presentation ────────────────────────────────────────────────────

def address_text(order: Order) -> str:
    a = order.address
    return f"{a.address_line}, {a.city}, {a.state} - {a.pincode}"


def display_date(order: Order) -> str:
    placed = order.placed_at
    if placed is None:
        return "N/A"
    return placed.isoformat()


def order_summary(order: Order) -> dict:
    """One order card in the list."""
    return {
        "id": order.id,
        "orderNumber": order.display_number,
        "customerName": order.address.full_name or "Customer",
        "addressText": address_text(order),
        "phone": order.address.phone or "N/A",
        "status": order.status,
        "statusTone": status_tone(order.status).value,
        "amount": money_str(order.amount),
        "payment": order.payment,
        "paymentLabel": "Paid" if order.payment else "Unpaid",
        "paymentLocked": payment_locked(order.status),
        "actions": available_actions(order.status),
    }


def order_detail(order: Order) -> dict:
    """Order modal: summary plus address and priced items."""
    a = order.address
    return {
        **order_summary(order),
        "date": display_date(order),
        "paymentMethod": order.payment_method or "N/A",
        "address": {
            "fullName": a.full_name,
            "addressLine": a.address_line or "N/A",
            "city": a.city,
            "state": a.state,
            "country": a.country,
            "pincode": a.pincode,
            "phone": a.phone or "N/A",
        },
        "items": [
            {
                "name": item.name,
                "code": item.code,
                "color": item.color,
                "size": item.size,
                "quantity": item.quantity,
                "price": money_str(item.price),
                "total": money_str(item.gross),
            }
            for item in order.items
        ],
    }


def status_tabs(orders: list[Order]) -> list[dict]:
    counts = {tab: 0 for tab in STATUS_TABS}
    for order in orders:
        if order.status in counts:
            counts[order.status] += 1
    return [{"status": tab, "count": counts[tab]} for tab in STATUS_TABS]
