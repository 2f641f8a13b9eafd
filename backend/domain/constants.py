"""
Domain constants used across services/routers.
"""

from domain.enums import OrderStatus, StatusTone

# Legal fulfillment moves; Delivered and Cancelled are terminal
ORDER_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.ORDER_PLACED: (OrderStatus.DISPATCHED, OrderStatus.CANCELLED),
    OrderStatus.DISPATCHED: (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED),
    OrderStatus.OUT_FOR_DELIVERY: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}

INITIAL_STATUS = OrderStatus.ORDER_PLACED

# Console button label for moving an order *into* a status
ACTION_LABELS = {
    OrderStatus.DISPATCHED: "Dispatch",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Deliver",
    OrderStatus.CANCELLED: "Cancel",
}

STATUS_MESSAGES = {
    OrderStatus.DISPATCHED: "Order marked as Dispatched",
    OrderStatus.OUT_FOR_DELIVERY: "Order marked as Out for Delivery",
    OrderStatus.DELIVERED: "Order marked as Delivered",
    OrderStatus.CANCELLED: "Order Cancelled",
}

STATUS_TONES = {
    OrderStatus.DELIVERED: StatusTone.SUCCESS,
    OrderStatus.CANCELLED: StatusTone.DANGER,
}

# Tabs shown above the order list, in display order
STATUS_TABS = [s.value for s in OrderStatus]

# Payment methods that mean "carrier collects cash at the door"
CASH_ON_DELIVERY_METHODS = {"cod", "cash on delivery", "cash-on-delivery", "cash_on_delivery"}

# Waybill page sizes, (width, height) in millimetres
PAGE_SIZES_MM = {
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "A6": (105.0, 148.0),
    "LABEL_4X6": (101.6, 152.4),
}

SHIPPING_LINE_LABEL = "Other/Shipping Charges"
