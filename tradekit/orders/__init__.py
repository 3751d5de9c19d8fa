"""Order model and order directives."""

from tradekit.orders.directives import (
    ClosePositionDirectives,
    IncreasePositionDirectives,
    OpenPositionDirectives,
    OrderDirectives,
    PositionProtection,
    parse_order_directives,
)
from tradekit.orders.order import Order

__all__ = [
    "Order",
    "OrderDirectives",
    "OpenPositionDirectives",
    "IncreasePositionDirectives",
    "ClosePositionDirectives",
    "PositionProtection",
    "parse_order_directives",
]
