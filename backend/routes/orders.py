"""
Order endpoints — list/filter/page, status + payment changes, invoice and waybill.
"""

import logging
import re
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from config import settings
from deps import (
    get_order_view,
    get_payment_controller,
    get_renderer,
    get_repository,
    get_status_controller,
)
from domain.responses import paginated_response, success_response
from exceptions import OrderServiceAuthError, OrderServiceError
from middleware.auth import require_operator_token
from models import Order, PaymentUpdateRequest, SellerProfile, StatusUpdateRequest
from services import order_view as views
from services.invoice_service import compute_invoice
from services.order_repository import OrderRepository
from services.order_view import OrderView
from services.payment_service import PaymentController
from services.status_service import StatusController
from services.waybill_service import DocumentRenderer, compose_waybill

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


async def _seller_profile(repo: OrderRepository, token: str) -> SellerProfile:
    """Seller profile for the return address; any failure except auth degrades to blanks."""
    try:
        return await repo.client.get_seller_profile(token)
    except OrderServiceAuthError:
        raise
    except OrderServiceError as e:
        logger.warning(f"Seller profile unavailable, printing blank return address: {e.message}")
        return SellerProfile()


def _content_disposition(filename: str) -> str:
    """Header value safe for any order number: ASCII fallback plus RFC 5987 filename*."""
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _rate(tax_rate: Optional[Decimal]) -> Decimal:
    return settings.tax_rate if tax_rate is None else tax_rate


@router.get("")
async def list_orders(
    status: Optional[str] = Query(None, description="Status tab, e.g. 'Order Placed'"),
    page: Optional[int] = Query(None, description="1-based page; out-of-range values clamp"),
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
    view: OrderView = Depends(get_order_view),
):
    orders = await repo.ensure_loaded(token)
    result = view.show(orders, status=status, page=page)
    return paginated_response(
        items=[views.order_summary(o) for o in result.items],
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        total=result.total,
        extra_meta={
            "activeStatus": view.active_status,
            "tabs": views.status_tabs(orders),
        },
    )


@router.post("/refresh")
async def refresh_orders(
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
):
    orders = await repo.refresh(token)
    return success_response(
        data={"tabs": views.status_tabs(orders)},
        meta={"total": len(orders)},
    )


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
):
    order = await repo.require(order_id, token)
    return success_response(data=views.order_detail(order))


@router.get("/{order_id}/raw")
async def get_order_raw(
    order_id: str,
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
):
    order = await repo.require(order_id, token)
    return success_response(data=order.to_wire())


@router.post("/{order_id}/status")
async def update_status(
    order_id: str,
    request: StatusUpdateRequest,
    token: str = Depends(require_operator_token),
    controller: StatusController = Depends(get_status_controller),
):
    result = await controller.transition(order_id, request.status, token)
    return success_response(
        data=views.order_summary(result.order),
        meta={"message": result.message},
    )


@router.post("/{order_id}/payment")
async def update_payment(
    order_id: str,
    request: PaymentUpdateRequest,
    token: str = Depends(require_operator_token),
    controller: PaymentController = Depends(get_payment_controller),
):
    result = await controller.set_payment(order_id, request.payment, token)
    return success_response(
        data=views.order_summary(result.order),
        meta={"message": result.message},
    )


@router.get("/{order_id}/invoice")
async def get_invoice(
    order_id: str,
    tax_rate: Optional[Decimal] = Query(None, ge=0, le=1, description="Override TAX_RATE, e.g. 0.05"),
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
):
    order = await repo.require(order_id, token)
    invoice = compute_invoice(order, _rate(tax_rate))
    return success_response(data={"orderId": order.id, **invoice.display()})


async def _layout(order: Order, repo: OrderRepository, token: str, tax_rate: Optional[Decimal]):
    invoice = compute_invoice(order, _rate(tax_rate))
    seller = await _seller_profile(repo, token)
    return compose_waybill(order, seller, invoice)


@router.get("/{order_id}/waybill")
async def get_waybill(
    order_id: str,
    tax_rate: Optional[Decimal] = Query(None, ge=0, le=1),
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
):
    order = await repo.require(order_id, token)
    layout = await _layout(order, repo, token, tax_rate)
    return success_response(data=layout.model_dump(mode="json", by_alias=True))


@router.get("/{order_id}/waybill/export")
async def export_waybill(
    order_id: str,
    tax_rate: Optional[Decimal] = Query(None, ge=0, le=1),
    token: str = Depends(require_operator_token),
    repo: OrderRepository = Depends(get_repository),
    renderer: DocumentRenderer = Depends(get_renderer),
):
    order = await repo.require(order_id, token)
    layout = await _layout(order, repo, token, tax_rate)
    # Renderers may block (PDF engines); keep them off the event loop
    content = await run_in_threadpool(renderer.render, layout)
    filename = f"waybill-{order.display_number}"
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"Content-Disposition": _content_disposition(filename)},
    )
