"""
Shared enums for market data, orders and accounts.
"""

from enum import Enum


class PriceSide(str, Enum):
    """Quotation side used to price a period."""
    BID = "bid"
    ASK = "ask"


class OrderDirection(str, Enum):
    """Order direction enum."""
    BUY = "buy"
    SELL = "sell"

    @property
    def opposite(self) -> "OrderDirection":
        return OrderDirection.SELL if self is OrderDirection.BUY else OrderDirection.BUY


class OrderPurpose(str, Enum):
    """Whether an order opens or closes exposure."""
    OPEN = "open"
    CLOSE = "close"


class OrderStatus(str, Enum):
    """Order status enum."""
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"


class AccountOperativity(str, Enum):
    """Account operativity (demo or real money)."""
    DEMO = "demo"
    REAL = "real"


class PositionAccounting(str, Enum):
    """How an account aggregates orders into positions."""
    HEDGED = "hedged"
    NETTED = "netted"


class SymbolType(str, Enum):
    """Asset class of a tradable symbol."""
    FOREX = "forex"
    CRYPTO = "crypto"
    STOCK = "stock"
    CFD = "cfd"
    COMMODITY = "commodity"
    INDEX = "index"
