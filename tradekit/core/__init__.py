"""Pure core contracts: enums and typed errors."""

from tradekit.core.enums import (
    AccountOperativity,
    OrderDirection,
    OrderPurpose,
    OrderStatus,
    PositionAccounting,
    PriceSide,
    SymbolType,
)
from tradekit.core.errors import (
    InvalidOrderStateError,
    MarketDataUnavailableError,
    OrderError,
    OrderNotFoundError,
    SymbolNotFoundError,
    TradekitError,
)

__all__ = [
    "AccountOperativity",
    "OrderDirection",
    "OrderPurpose",
    "OrderStatus",
    "PositionAccounting",
    "PriceSide",
    "SymbolType",
    "TradekitError",
    "InvalidOrderStateError",
    "MarketDataUnavailableError",
    "OrderError",
    "OrderNotFoundError",
    "SymbolNotFoundError",
]
