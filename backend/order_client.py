"""
Order service client — the storefront backend that owns orders.

Every call forwards the operator's bearer token. Transport errors, 5xx and
429 responses are retried with exponential backoff; credential failures and
explicit refusals are raised immediately.

Wire format (JSON envelope):
    POST /api/order/list           {}                      -> {success, orders}
    POST /api/order/status         {orderId, status}       -> {success, message}
    POST /api/order/paymentstatus  {orderId, payment}      -> {success, message}
    GET  /api/seller/profile                               -> {success, profile}
"""
import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from config import settings
from exceptions import (
    OrderServiceAuthError,
    OrderServiceRejectedError,
    OrderServiceUnavailableError,
)
from models import Order, SellerProfile

logger = logging.getLogger(__name__)

LIST_ORDERS_PATH = "/api/order/list"
ORDER_STATUS_PATH = "/api/order/status"
PAYMENT_STATUS_PATH = "/api/order/paymentstatus"
SELLER_PROFILE_PATH = "/api/seller/profile"

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _upstream_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


class OrderServiceClient:
    """Async client for the external order service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        oldest_first: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.order_service_url).rstrip("/")
        self.timeout = settings.order_service_timeout_seconds if timeout is None else timeout
        self.max_retries = settings.order_service_max_retries if max_retries is None else max_retries
        self.backoff_seconds = (
            settings.order_service_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self.oldest_first = settings.order_feed_oldest_first if oldest_first is None else oldest_first
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client (must happen inside the event loop)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(self, method: str, path: str, token: str, json: Optional[dict] = None) -> dict:
        """
        Send one request with the retry policy applied.

        Returns:
            The decoded JSON envelope (success already checked).

        Raises:
            OrderServiceAuthError: 401/403, or no token to forward
            OrderServiceRejectedError: other 4xx, or success: false
            OrderServiceUnavailableError: transport/5xx/429 after all retries
        """
        if not token:
            raise OrderServiceAuthError("Missing bearer token for order service")

        headers = {"Authorization": f"Bearer {token}"}
        attempts = self.max_retries + 1
        last_error = "no response"
        last_status = None

        for attempt in range(1, attempts + 1):
            try:
                response = await self.client.request(method, path, json=json, headers=headers)
            except httpx.TransportError as e:
                last_error, last_status = f"{type(e).__name__}: {e}", None
            else:
                if response.status_code in (401, 403):
                    raise OrderServiceAuthError(
                        _upstream_message(response, "Not authorized"),
                        status_code=response.status_code,
                    )
                if response.status_code not in _RETRYABLE_STATUS:
                    return self._unwrap(response, path)
                last_error = _upstream_message(response, f"HTTP {response.status_code}")
                last_status = response.status_code

            if attempt < attempts:
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    f"Order service {method} {path} failed ({last_error}), "
                    f"retry {attempt}/{self.max_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        logger.error(f"Order service {method} {path} gave up after {attempts} attempt(s): {last_error}")
        raise OrderServiceUnavailableError(last_error, status_code=last_status)

    @staticmethod
    def _unwrap(response: httpx.Response, path: str) -> dict:
        if response.is_error:
            raise OrderServiceRejectedError(
                _upstream_message(response, f"HTTP {response.status_code}"),
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError:
            raise OrderServiceRejectedError(
                f"Order service returned a non-JSON response for {path}",
                status_code=response.status_code,
            )
        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise OrderServiceRejectedError(
                message or f"Order service refused {path}",
                status_code=response.status_code,
            )
        return body

    # ── Operations ──────────────────────────────────────────────────

    async def list_orders(self, token: str) -> list[Order]:
        """Fetch every order, newest first."""
        body = await self._request("POST", LIST_ORDERS_PATH, token, json={})
        raw_orders = body.get("orders")
        if not isinstance(raw_orders, list):
            raw_orders = []
        orders = []
        for raw in raw_orders:
            try:
                orders.append(Order.from_wire(raw))
            except ValidationError as e:
                raw_id = raw.get("_id") if isinstance(raw, dict) else None
                logger.warning(f"Skipping malformed order {raw_id}: {e.error_count()} error(s)")
        if self.oldest_first:
            orders.reverse()
        return orders

    async def set_order_status(self, token: str, order_id: str, status: str) -> str:
        body = await self._request(
            "POST", ORDER_STATUS_PATH, token, json={"orderId": order_id, "status": status}
        )
        return str(body.get("message") or "")

    async def set_payment_status(self, token: str, order_id: str, paid: bool) -> str:
        body = await self._request(
            "POST", PAYMENT_STATUS_PATH, token, json={"orderId": order_id, "payment": paid}
        )
        return str(body.get("message") or "")

    async def get_seller_profile(self, token: str) -> SellerProfile:
        body = await self._request("GET", SELLER_PROFILE_PATH, token)
        return SellerProfile.model_validate(body.get("profile") or {})


# Global client instance
order_client = OrderServiceClient()
