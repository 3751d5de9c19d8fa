"""Broker-agnostic trading SDK: market data value types, tick aggregation and account contracts."""

from tradekit.brokers import (
    Broker,
    BrokerAccount,
    BrokerAccountParameters,
    PlaygroundBroker,
    PlaygroundBrokerAccount,
)
from tradekit.core import (
    AccountOperativity,
    InvalidOrderStateError,
    MarketDataUnavailableError,
    OrderDirection,
    OrderError,
    OrderNotFoundError,
    OrderPurpose,
    OrderStatus,
    PositionAccounting,
    PriceSide,
    SymbolNotFoundError,
    SymbolType,
    TradekitError,
)
from tradekit.market import Period, Quotation, Symbol, Tick, link_ticks, periods_from_ticks
from tradekit.orders import (
    ClosePositionDirectives,
    IncreasePositionDirectives,
    OpenPositionDirectives,
    Order,
    OrderDirectives,
    PositionProtection,
    parse_order_directives,
)

__version__ = "0.1.0"

__all__ = [
    "AccountOperativity",
    "Broker",
    "BrokerAccount",
    "BrokerAccountParameters",
    "ClosePositionDirectives",
    "IncreasePositionDirectives",
    "InvalidOrderStateError",
    "MarketDataUnavailableError",
    "OpenPositionDirectives",
    "Order",
    "OrderDirection",
    "OrderDirectives",
    "OrderError",
    "OrderNotFoundError",
    "OrderPurpose",
    "OrderStatus",
    "Period",
    "PlaygroundBroker",
    "PlaygroundBrokerAccount",
    "PositionAccounting",
    "PositionProtection",
    "PriceSide",
    "Quotation",
    "Symbol",
    "SymbolNotFoundError",
    "SymbolType",
    "Tick",
    "TradekitError",
    "link_ticks",
    "parse_order_directives",
    "periods_from_ticks",
]
