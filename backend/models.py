"""
Pydantic models for order service payloads and request/response validation.
"""
import copy
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from domain.constants import INITIAL_STATUS


class ApiBase(BaseModel):
    """Shared base: allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


def _as_text(value: Any) -> Any:
    """Upstream sends null, numbers or strings for free-text fields."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_decimal(value: Any) -> Any:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, float):
        # str() keeps 105.1 as 105.1 instead of its binary expansion
        return Decimal(str(value))
    return value


# ── Order Service Payloads ──────────────────────────────────────────

class Address(ApiBase):
    """Shipping address snapshot captured at order time."""
    full_name: str = Field("", alias="fullName")
    address_line: str = Field("", alias="addressLine")
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""
    phone: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)


class OrderItem(ApiBase):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    code: str = ""
    color: str = ""
    size: str = ""
    quantity: int = Field(1, ge=1)
    price: Decimal = Decimal("0")

    @field_validator("name", "code", "color", "size", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value):
        if value is None or value == "":
            return 1
        return value

    @field_validator("price", mode="before")
    @classmethod
    def coerce_money(cls, value):
        return _as_decimal(value)

    @property
    def gross(self) -> Decimal:
        """Tax-inclusive line total."""
        return self.price * self.quantity


class Order(ApiBase):
    """
    Order as mirrored from the order service.

    Orders built with from_wire() also keep the exact upstream payload, so
    the raw view shows what the server sent: no coercion, no local patches.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    _wire: Optional[dict] = PrivateAttr(default=None)

    id: str = Field(..., alias="_id")
    order_number: str = Field("", alias="orderNumber")
    status: str = INITIAL_STATUS.value
    payment: bool = False
    payment_method: str = Field("", alias="paymentMethod")
    amount: Decimal = Decimal("0")
    items: List[OrderItem] = Field(default_factory=list)
    address: Address = Field(default_factory=Address)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    date: Optional[datetime] = None
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("id", "order_number", "payment_method", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_money(cls, value):
        return _as_decimal(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value):
        return value or INITIAL_STATUS.value

    @field_validator("payment", mode="before")
    @classmethod
    def default_payment(cls, value):
        return False if value is None else value

    @field_validator("address", mode="before")
    @classmethod
    def default_address(cls, value):
        return value or {}

    @field_validator("items", mode="before")
    @classmethod
    def default_items(cls, value):
        return value or []

    @property
    def display_number(self) -> str:
        return self.order_number or self.id

    @property
    def placed_at(self) -> Optional[datetime]:
        return self.created_at or self.date or self.updated_at

    @classmethod
    def from_wire(cls, payload: dict) -> "Order":
        """Validate an order service payload and remember it unchanged."""
        order = cls.model_validate(payload)
        order._wire = copy.deepcopy(payload)
        return order

    def to_wire(self) -> dict:
        """
        The upstream payload exactly as received.

        Copies made by model_copy() share it, so optimistic patches never show
        here. Orders built locally fall back to an aliased dump.
        """
        if self._wire is not None:
            return copy.deepcopy(self._wire)
        return self.model_dump(mode="json", by_alias=True)


class SellerProfile(ApiBase):
    """Return address + tax identity printed on waybills. Every field may be absent."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    shop_name: str = Field("", alias="shopName")
    address_line: str = Field("", alias="addressLine")
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = Field("", alias="taxId")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)


# ── Console Requests ────────────────────────────────────────────────

class StatusUpdateRequest(ApiBase):
    """Move an order to another fulfillment status."""
    status: str = Field(..., min_length=1, description="Target status, e.g. 'Dispatched'")


class PaymentUpdateRequest(ApiBase):
    """Mark payment as collected (true) or not collected (false)."""
    payment: bool
