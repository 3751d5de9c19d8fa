"""Typed errors for tradekit accounts, orders and market data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tradekit.orders.order import Order


class TradekitError(Exception):
    """Base class for tradekit errors."""


class InvalidOrderStateError(TradekitError):
    """Raised when an order lacks a field required by a computation."""

    def __init__(self, message: str, ticket: Optional[int] = None) -> None:
        self.ticket = ticket
        super().__init__(message)


class OrderNotFoundError(TradekitError):
    """Raised when no order exists for a ticket."""

    def __init__(self, ticket: int) -> None:
        self.ticket = ticket
        super().__init__(f"Order not found: {ticket}")


class SymbolNotFoundError(TradekitError):
    """Raised when a symbol is not available on the account."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Symbol not found: {symbol}")


class MarketDataUnavailableError(TradekitError):
    """Raised when no tick has been received for a symbol."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"No market data available for {symbol}")


class OrderError(TradekitError):
    """Exception raised by order operations."""

    def __init__(
        self,
        message: str,
        order: Optional[Order] = None,
        broker_error_code: Optional[str] = None,
    ) -> None:
        self.order = order
        self.broker_error_code = broker_error_code
        super().__init__(message)
