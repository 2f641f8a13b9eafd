"""
Tests for the order service client.

Tests: feed ordering, retry policy, credential and refusal handling,
malformed payloads, seller profile.
"""
import httpx
import pytest

from exceptions import (
    OrderServiceAuthError,
    OrderServiceRejectedError,
    OrderServiceUnavailableError,
)
from order_client import (
    LIST_ORDERS_PATH,
    ORDER_STATUS_PATH,
    SELLER_PROFILE_PATH,
    OrderServiceClient,
)
from tests.fakes import TOKEN, FakeOrderService, make_client, make_order


class TestListOrders:

    @pytest.mark.asyncio
    async def test_newest_first(self, order_client):
        orders = await order_client.list_orders(TOKEN)
        assert [o.id for o in orders] == ["o-3", "o-2", "o-1"]

    @pytest.mark.asyncio
    async def test_feed_order_kept_when_already_newest_first(self, fake_service):
        client = OrderServiceClient(
            "http://orders.test",
            backoff_seconds=0,
            oldest_first=False,
            transport=httpx.MockTransport(fake_service.handler),
        )
        orders = await client.list_orders(TOKEN)
        assert [o.id for o in orders] == ["o-1", "o-2", "o-3"]
        await client.close()

    @pytest.mark.asyncio
    async def test_unknown_fields_preserved(self, order_client):
        orders = await order_client.list_orders(TOKEN)
        assert orders[-1].to_wire()["userId"] == "u-1"

    @pytest.mark.asyncio
    async def test_malformed_order_skipped(self):
        service = FakeOrderService([make_order("good"), {"status": "Order Placed"}])
        client = make_client(service)
        orders = await client.list_orders(TOKEN)
        assert [o.id for o in orders] == ["good"]
        await client.close()

    @pytest.mark.asyncio
    async def test_null_fields_keep_the_order(self):
        """Partial orders are shown with placeholders instead of being dropped."""
        service = FakeOrderService([
            make_order("no-payment", payment=None),
            make_order("no-status", status=None),
            make_order("no-qty", items=[{"name": "Tee", "quantity": None, "price": 99}]),
        ])
        client = make_client(service)
        orders = {o.id: o for o in await client.list_orders(TOKEN)}
        await client.close()

        assert set(orders) == {"no-payment", "no-status", "no-qty"}
        assert orders["no-payment"].payment is False
        assert orders["no-status"].status == "Order Placed"
        assert orders["no-qty"].items[0].quantity == 1

    @pytest.mark.asyncio
    async def test_wire_payload_is_kept_verbatim(self, order_client, fake_service):
        orders = await order_client.list_orders(TOKEN)
        assert orders[-1].to_wire() == fake_service.find("o-1")

    @pytest.mark.asyncio
    async def test_missing_orders_key_is_empty(self, order_client, fake_service):
        fake_service.fail(LIST_ORDERS_PATH, status_code=200, body={"success": True})
        assert await order_client.list_orders(TOKEN) == []


class TestRetryPolicy:

    @pytest.mark.asyncio
    async def test_recovers_after_server_error(self, order_client, fake_service):
        fake_service.fail(LIST_ORDERS_PATH, status_code=503, times=2)
        orders = await order_client.list_orders(TOKEN)
        assert len(orders) == 3
        assert fake_service.calls_to(LIST_ORDERS_PATH) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self, order_client, fake_service):
        fake_service.fail(LIST_ORDERS_PATH, status_code=500, times=3)
        with pytest.raises(OrderServiceUnavailableError) as exc:
            await order_client.list_orders(TOKEN)
        assert exc.value.status_code == 500
        assert fake_service.calls_to(LIST_ORDERS_PATH) == 3

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, order_client, fake_service):
        fake_service.fail(LIST_ORDERS_PATH, status_code=429)
        assert len(await order_client.list_orders(TOKEN)) == 3

    @pytest.mark.asyncio
    async def test_transport_error_is_retried(self):
        attempts = []

        async def flaky(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"success": True, "orders": []})

        client = OrderServiceClient(
            "http://orders.test", backoff_seconds=0, transport=httpx.MockTransport(flaky)
        )
        assert await client.list_orders(TOKEN) == []
        assert len(attempts) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_exhausted(self):
        async def down(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = OrderServiceClient(
            "http://orders.test",
            max_retries=1,
            backoff_seconds=0,
            transport=httpx.MockTransport(down),
        )
        with pytest.raises(OrderServiceUnavailableError) as exc:
            await client.list_orders(TOKEN)
        assert exc.value.status_code is None
        assert "ConnectTimeout" in exc.value.message
        await client.close()


class TestRefusals:

    @pytest.mark.asyncio
    async def test_bad_token_not_retried(self, order_client, fake_service):
        with pytest.raises(OrderServiceAuthError) as exc:
            await order_client.list_orders("wrong")
        assert exc.value.status_code == 401
        assert exc.value.message == "Not Authorized Login Again"
        assert fake_service.calls_to(LIST_ORDERS_PATH) == 1

    @pytest.mark.asyncio
    async def test_missing_token_never_sent(self, order_client, fake_service):
        with pytest.raises(OrderServiceAuthError):
            await order_client.list_orders("")
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_success_false_is_rejection(self, order_client, fake_service):
        with pytest.raises(OrderServiceRejectedError, match="Order not found"):
            await order_client.set_order_status(TOKEN, "missing", "Dispatched")
        assert fake_service.calls_to(ORDER_STATUS_PATH) == 1

    @pytest.mark.asyncio
    async def test_client_error_is_rejection(self, order_client, fake_service):
        fake_service.fail(ORDER_STATUS_PATH, status_code=422, body={"message": "Bad status"})
        with pytest.raises(OrderServiceRejectedError) as exc:
            await order_client.set_order_status(TOKEN, "o-1", "Dispatched")
        assert exc.value.status_code == 422
        assert exc.value.message == "Bad status"

    @pytest.mark.asyncio
    async def test_non_json_body_is_rejection(self):
        async def html(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        client = OrderServiceClient(
            "http://orders.test", backoff_seconds=0, transport=httpx.MockTransport(html)
        )
        with pytest.raises(OrderServiceRejectedError, match="non-JSON"):
            await client.list_orders(TOKEN)
        await client.close()


class TestMutationsAndProfile:

    @pytest.mark.asyncio
    async def test_set_order_status_returns_message(self, order_client, fake_service):
        message = await order_client.set_order_status(TOKEN, "o-1", "Dispatched")
        assert message == "Status Updated"
        assert fake_service.find("o-1")["status"] == "Dispatched"

    @pytest.mark.asyncio
    async def test_set_payment_status(self, order_client, fake_service):
        await order_client.set_payment_status(TOKEN, "o-1", True)
        assert fake_service.find("o-1")["payment"] is True

    @pytest.mark.asyncio
    async def test_seller_profile(self, order_client):
        profile = await order_client.get_seller_profile(TOKEN)
        assert profile.shop_name == "Threadline Wholesale"
        assert profile.tax_id == "24ABCDE1234F1Z5"

    @pytest.mark.asyncio
    async def test_empty_seller_profile(self, order_client, fake_service):
        fake_service.fail(SELLER_PROFILE_PATH, status_code=200, body={"success": True, "profile": None})
        profile = await order_client.get_seller_profile(TOKEN)
        assert profile.shop_name == ""
