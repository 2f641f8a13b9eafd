"""
Invoice service — reverse tax decomposition of tax-inclusive order totals.

Stored prices already include tax. For a gross amount G and rate r:

    taxable_value = G / (1 + r)
    tax_amount    = G - taxable_value

Each item line (price x quantity) is decomposed, and so is the residual
charge (order amount minus the item total), which covers shipping and other
charges. All arithmetic stays in full Decimal precision; figures are rounded
half-up to 2 places only in display(), once per printed figure.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from domain.constants import SHIPPING_LINE_LABEL
from domain.errors import ValidationError
from models import Order

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Decimal) -> Decimal:
    """Round to 2 places, half-up (display only)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value: Decimal) -> str:
    return f"{to_money(value):.2f}"


def split_inclusive(gross: Decimal, tax_rate: Decimal) -> tuple[Decimal, Decimal]:
    """Split a tax-inclusive amount into (taxable_value, tax_amount), unrounded."""
    if tax_rate == ZERO:
        return gross, ZERO
    taxable = gross / (Decimal(1) + tax_rate)
    return taxable, gross - taxable


@dataclass(frozen=True)
class InvoiceLine:
    description: str
    gross: Decimal
    taxable_value: Decimal
    tax_amount: Decimal
    code: str = ""
    quantity: int = 1
    unit_price: Decimal = ZERO

    def display(self) -> dict:
        return {
            "description": self.description,
            "code": self.code,
            "quantity": self.quantity,
            "unitPrice": money_str(self.unit_price),
            "gross": money_str(self.gross),
            "taxableValue": money_str(self.taxable_value),
            "taxAmount": money_str(self.tax_amount),
        }


@dataclass(frozen=True)
class InvoiceBreakdown:
    tax_rate: Decimal
    lines: list[InvoiceLine] = field(default_factory=list)
    shipping: InvoiceLine | None = None
    total_gross: Decimal = ZERO

    @property
    def items_gross(self) -> Decimal:
        return sum((line.gross for line in self.lines), ZERO)

    @property
    def total_taxable(self) -> Decimal:
        return sum((line.taxable_value for line in self._all_lines()), ZERO)

    @property
    def total_tax(self) -> Decimal:
        return sum((line.tax_amount for line in self._all_lines()), ZERO)

    def _all_lines(self) -> list[InvoiceLine]:
        return self.lines + ([self.shipping] if self.shipping else [])

    @property
    def tax_rate_label(self) -> str:
        percent = (self.tax_rate * 100).normalize()
        return f"{percent:f}%"

    def display(self) -> dict:
        """Rounded, string-valued figures for documents and API responses."""
        return {
            "taxRate": self.tax_rate_label,
            "lines": [line.display() for line in self.lines],
            "shipping": self.shipping.display() if self.shipping else None,
            "totals": {
                "taxableValue": money_str(self.total_taxable),
                "taxAmount": money_str(self.total_tax),
                "gross": money_str(self.total_gross),
            },
        }


def compute_invoice(order: Order, tax_rate: Decimal) -> InvoiceBreakdown:
    """
    Decompose an order's tax-inclusive amounts into taxable value and tax.

    Args:
        order: Order with tax-inclusive item prices and grand total
        tax_rate: e.g. Decimal("0.05") for 5%

    Returns:
        InvoiceBreakdown with per-item lines, a shipping line and totals

    Raises:
        ValidationError: if tax_rate is negative
    """
    tax_rate = Decimal(str(tax_rate))
    if tax_rate < ZERO:
        raise ValidationError("Tax rate must not be negative", field="tax_rate")

    lines = []
    for item in order.items:
        gross = item.gross
        taxable, tax = split_inclusive(gross, tax_rate)
        lines.append(
            InvoiceLine(
                description=item.name,
                code=item.code,
                quantity=item.quantity,
                unit_price=item.price,
                gross=gross,
                taxable_value=taxable,
                tax_amount=tax,
            )
        )

    items_gross = sum((line.gross for line in lines), ZERO)
    residual = order.amount - items_gross
    if residual < ZERO:
        logger.warning(
            f"Order {order.id}: amount {order.amount} is below item total {items_gross}; "
            f"treating other charges as 0"
        )
        residual = ZERO

    shipping_taxable, shipping_tax = split_inclusive(residual, tax_rate)
    shipping = InvoiceLine(
        description=SHIPPING_LINE_LABEL,
        gross=residual,
        taxable_value=shipping_taxable,
        tax_amount=shipping_tax,
        unit_price=residual,
    )

    return InvoiceBreakdown(
        tax_rate=tax_rate,
        lines=lines,
        shipping=shipping,
        total_gross=order.amount,
    )
