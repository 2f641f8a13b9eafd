"""
Test doubles for the storefront's order service.

FakeOrderService is an in-memory implementation served through
httpx.MockTransport, so the real OrderServiceClient (retries, auth handling,
envelope checks) is exercised end to end.
"""
import asyncio
import copy
import json

import httpx

from order_client import (
    LIST_ORDERS_PATH,
    ORDER_STATUS_PATH,
    PAYMENT_STATUS_PATH,
    SELLER_PROFILE_PATH,
    OrderServiceClient,
)

TOKEN = "admin-token-123"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


# ── Sample Data ──────────────────────────────────────────────────────

def make_order(order_id: str, status: str = "Order Placed", **overrides) -> dict:
    """Order payload shaped like the storefront's /api/order/list entries."""
    order = {
        "_id": order_id,
        "orderNumber": f"ORD-{order_id}",
        "status": status,
        "payment": False,
        "paymentMethod": "COD",
        "amount": 250,
        "items": [
            {
                "name": "Linen Shirt",
                "code": "LS-01",
                "color": "White",
                "size": "M",
                "quantity": 2,
                "price": 105,
            }
        ],
        "address": {
            "fullName": "Asha Verma",
            "addressLine": "12 MG Road",
            "city": "Jaipur",
            "state": "Rajasthan",
            "pincode": 302001,
            "country": "India",
            "phone": "9876543210",
        },
        "createdAt": "2026-01-05T10:30:00Z",
        "userId": "u-1",
    }
    order.update(overrides)
    return order


SELLER = {
    "shopName": "Threadline Wholesale",
    "addressLine": "Plot 4, Textile Park",
    "city": "Surat",
    "state": "Gujarat",
    "pincode": "395003",
    "country": "India",
    "phone": "0261-555000",
    "taxId": "24ABCDE1234F1Z5",
}


# ── Fake Order Service ───────────────────────────────────────────────

class FakeOrderService:
    """In-memory storefront order API. Orders are kept oldest-first, like the real one."""

    def __init__(self, orders: list[dict], token: str = TOKEN, seller: dict | None = None):
        self.orders = copy.deepcopy(orders)
        self.token = token
        self.seller = dict(SELLER) if seller is None else seller
        self.calls: list[tuple[str, str, dict | None]] = []
        self._scripted: dict[str, list[tuple[int, dict, bool]]] = {}
        # Set `hold` to an Event to park mutation requests until it is set
        self.hold: asyncio.Event | None = None
        self.received = asyncio.Event()

    def fail(self, path: str, status_code: int = 500, times: int = 1,
             body: dict | None = None, apply: bool = False) -> None:
        """Answer the next `times` calls to `path` with an error (optionally applying the change first)."""
        payload = body if body is not None else {"success": False, "message": "Internal error"}
        self._scripted.setdefault(path, []).extend([(status_code, payload, apply)] * times)

    def find(self, order_id: str) -> dict | None:
        return next((o for o in self.orders if o["_id"] == order_id), None)

    def calls_to(self, path: str) -> int:
        return sum(1 for _, p, _ in self.calls if p == path)

    def _apply(self, path: str, body: dict) -> bool:
        order = self.find(body.get("orderId"))
        if order is None:
            return False
        if path == ORDER_STATUS_PATH:
            order["status"] = body["status"]
        else:
            order["payment"] = body["payment"]
        return True

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"success": False, "message": "Not Authorized Login Again"})

        if path in (ORDER_STATUS_PATH, PAYMENT_STATUS_PATH) and self.hold is not None:
            self.received.set()
            await self.hold.wait()

        scripted = self._scripted.get(path)
        if scripted:
            status_code, payload, apply = scripted.pop(0)
            if apply:
                self._apply(path, body)
            return httpx.Response(status_code, json=payload)

        if path == LIST_ORDERS_PATH:
            return httpx.Response(200, json={"success": True, "orders": copy.deepcopy(self.orders)})
        if path in (ORDER_STATUS_PATH, PAYMENT_STATUS_PATH):
            if not self._apply(path, body):
                return httpx.Response(200, json={"success": False, "message": "Order not found"})
            message = "Status Updated" if path == ORDER_STATUS_PATH else "Payment Status Updated"
            return httpx.Response(200, json={"success": True, "message": message})
        if path == SELLER_PROFILE_PATH:
            return httpx.Response(200, json={"success": True, "profile": self.seller})
        return httpx.Response(404, json={"success": False, "message": "Not found"})


def make_client(service: FakeOrderService, max_retries: int = 2) -> OrderServiceClient:
    return OrderServiceClient(
        "http://orders.test",
        timeout=5.0,
        max_retries=max_retries,
        backoff_seconds=0,
        oldest_first=True,
        transport=httpx.MockTransport(service.handler),
    )
