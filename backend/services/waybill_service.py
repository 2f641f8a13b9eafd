"""
Waybill service — shipment label + tax invoice layout.

compose_waybill() builds a structured layout only; turning it into a
fixed-page-size document is the job of a DocumentRenderer.

The carrier-facing contents table never carries prices: ContentsRow has no
price fields at all. Prices appear only in the tax-invoice block.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from config import settings
from domain.constants import CASH_ON_DELIVERY_METHODS, PAGE_SIZES_MM
from models import Address, Order, SellerProfile
from services.invoice_service import InvoiceBreakdown, money_str

logger = logging.getLogger(__name__)


class LayoutBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ── Layout Blocks ───────────────────────────────────────────────────

class PageSize(LayoutBase):
    name: str
    width_mm: float = Field(..., alias="widthMm")
    height_mm: float = Field(..., alias="heightMm")


class HeaderBlock(LayoutBase):
    order_number: str = Field(..., alias="orderNumber")
    order_id: str = Field(..., alias="orderId")
    order_date: str = Field(..., alias="orderDate")


class AddressBlock(LayoutBase):
    title: str
    name: str = ""
    lines: list[str] = Field(default_factory=list)
    phone: str = ""


class PaymentBanner(LayoutBase):
    method: str
    cash_on_delivery: bool = Field(..., alias="cashOnDelivery")
    collect_amount: Optional[str] = Field(None, alias="collectAmount")
    text: str


class ContentsRow(LayoutBase):
    """One parcel line as the carrier sees it."""
    name: str
    code: str
    quantity: int
    size: str
    color: str


class ContentsTable(LayoutBase):
    columns: list[str] = Field(default_factory=lambda: ["Product", "Code", "Qty", "Size", "Color"])
    rows: list[ContentsRow] = Field(default_factory=list)
    total_quantity: int = Field(0, alias="totalQuantity")


class TaxInvoiceLine(LayoutBase):
    description: str
    code: str = ""
    quantity: int = 1
    unit_price: str = Field(..., alias="unitPrice")
    taxable_value: str = Field(..., alias="taxableValue")
    tax_amount: str = Field(..., alias="taxAmount")
    gross: str


class TaxInvoiceBlock(LayoutBase):
    seller_name: str = Field("", alias="sellerName")
    seller_tax_id: str = Field("", alias="sellerTaxId")
    invoice_number: str = Field(..., alias="invoiceNumber")
    order_number: str = Field(..., alias="orderNumber")
    order_date: str = Field(..., alias="orderDate")
    invoice_date: str = Field(..., alias="invoiceDate")
    tax_rate: str = Field(..., alias="taxRate")
    currency: str
    lines: list[TaxInvoiceLine]
    shipping: TaxInvoiceLine
    total_taxable: str = Field(..., alias="totalTaxable")
    total_tax: str = Field(..., alias="totalTax")
    total_gross: str = Field(..., alias="totalGross")


class DocumentLayout(LayoutBase):
    page_size: PageSize = Field(..., alias="pageSize")
    header: HeaderBlock
    delivery_address: AddressBlock = Field(..., alias="deliveryAddress")
    return_address: AddressBlock = Field(..., alias="returnAddress")
    payment_banner: PaymentBanner = Field(..., alias="paymentBanner")
    contents: ContentsTable
    tax_invoice: TaxInvoiceBlock = Field(..., alias="taxInvoice")


# ── Rendering ───────────────────────────────────────────────────────

class DocumentRenderer(Protocol):
    """Turns a layout into a fixed-page-size document (PDF, image, ...)."""
    media_type: str

    def render(self, layout: DocumentLayout) -> bytes:
        ...


class JsonLayoutRenderer:
    """Default renderer: the layout itself, for a front-end that draws the page."""
    media_type = "application/json"

    def render(self, layout: DocumentLayout) -> bytes:
        return json.dumps(layout.model_dump(mode="json", by_alias=True), ensure_ascii=False).encode("utf-8")


# ── Composition ─────────────────────────────────────────────────────

def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d %b %Y")


def resolve_page_size(name: Optional[str] = None) -> PageSize:
    name = name or settings.waybill_page_size
    if name not in PAGE_SIZES_MM:
        raise ValueError(f"Unknown page size {name!r}; expected one of {', '.join(PAGE_SIZES_MM)}")
    width, height = PAGE_SIZES_MM[name]
    return PageSize(name=name, widthMm=width, heightMm=height)


def _join(*parts: str, sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)


def delivery_block(address: Address) -> AddressBlock:
    return AddressBlock(
        title="Deliver To",
        name=address.full_name,
        lines=[
            line for line in (
                address.address_line,
                _join(address.city, address.state),
                _join(address.country, address.pincode, sep=" - "),
            ) if line
        ],
        phone=address.phone,
    )


def return_block(seller: Optional[SellerProfile]) -> AddressBlock:
    seller = seller or SellerProfile()
    return AddressBlock(
        title="Return Address",
        name=seller.shop_name,
        lines=[
            line for line in (
                seller.address_line,
                _join(seller.city, seller.state),
                _join(seller.country, seller.pincode, sep=" - "),
            ) if line
        ],
        phone=seller.phone,
    )


def is_cash_on_delivery(payment_method: str) -> bool:
    return payment_method.strip().lower() in CASH_ON_DELIVERY_METHODS


def payment_banner(order: Order, currency: str) -> PaymentBanner:
    cod = is_cash_on_delivery(order.payment_method)
    method = order.payment_method or "N/A"
    if cod and not order.payment:
        amount = money_str(order.amount)
        return PaymentBanner(
            method=method,
            cashOnDelivery=True,
            collectAmount=amount,
            text=f"COLLECT CASH {currency}{amount}",
        )
    return PaymentBanner(
        method=method,
        cashOnDelivery=cod,
        text="PREPAID - No cash to be collected",
    )


def contents_table(order: Order) -> ContentsTable:
    rows = [
        ContentsRow(
            name=item.name,
            code=item.code,
            quantity=item.quantity,
            size=item.size,
            color=item.color,
        )
        for item in order.items
    ]
    return ContentsTable(rows=rows, totalQuantity=sum(r.quantity for r in rows))


def _invoice_line(line) -> TaxInvoiceLine:
    shown = line.display()
    return TaxInvoiceLine(
        description=shown["description"],
        code=shown["code"],
        quantity=shown["quantity"],
        unitPrice=shown["unitPrice"],
        taxableValue=shown["taxableValue"],
        taxAmount=shown["taxAmount"],
        gross=shown["gross"],
    )


def tax_invoice_block(
    order: Order,
    seller: Optional[SellerProfile],
    invoice: InvoiceBreakdown,
    issued_at: datetime,
    currency: str,
) -> TaxInvoiceBlock:
    seller = seller or SellerProfile()
    totals = invoice.display()["totals"]
    return TaxInvoiceBlock(
        sellerName=seller.shop_name,
        sellerTaxId=seller.tax_id,
        invoiceNumber=f"INV-{order.display_number}",
        orderNumber=order.display_number,
        orderDate=format_date(order.placed_at),
        invoiceDate=format_date(issued_at),
        taxRate=invoice.tax_rate_label,
        currency=currency,
        lines=[_invoice_line(line) for line in invoice.lines],
        shipping=_invoice_line(invoice.shipping),
        totalTaxable=totals["taxableValue"],
        totalTax=totals["taxAmount"],
        totalGross=totals["gross"],
    )


def compose_waybill(
    order: Order,
    seller: Optional[SellerProfile],
    invoice: InvoiceBreakdown,
    *,
    page: Optional[str] = None,
    issued_at: Optional[datetime] = None,
    currency: Optional[str] = None,
) -> DocumentLayout:
    """
    Assemble the shipment label + tax invoice layout for one order.

    Args:
        order: Order to ship
        seller: Seller profile for the return address (None or partial is fine)
        invoice: Breakdown from invoice_service.compute_invoice()
        page: Page size name (default: WAYBILL_PAGE_SIZE)
        issued_at: Invoice date (default: now, UTC)
        currency: Currency symbol (default: CURRENCY_SYMBOL)

    Returns:
        DocumentLayout ready for a DocumentRenderer
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    currency = settings.currency_symbol if currency is None else currency

    layout = DocumentLayout(
        pageSize=resolve_page_size(page),
        header=HeaderBlock(
            orderNumber=order.display_number,
            orderId=order.id,
            orderDate=format_date(order.placed_at),
        ),
        deliveryAddress=delivery_block(order.address),
        returnAddress=return_block(seller),
        paymentBanner=payment_banner(order, currency),
        contents=contents_table(order),
        taxInvoice=tax_invoice_block(order, seller, invoice, issued_at, currency),
    )
    logger.info(f"Composed waybill for order {order.display_number} ({layout.page_size.name})")
    return layout
