"""
Abstract Broker Account Interface
Uniform trading contract every broker integration implements.

Primitive operations are abstract coroutines: an integration may need a
network round trip to answer them. Derived metrics (free margin, margin
level, gross profit, status filters) are composed here from the primitives
so integrations never re-derive them.
"""

import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tradekit.brokers.broker import Broker
from tradekit.core.enums import (
    AccountOperativity,
    OrderDirection,
    OrderStatus,
    PositionAccounting,
    PriceSide,
    SymbolType,
)
from tradekit.core.errors import InvalidOrderStateError, OrderNotFoundError
from tradekit.market.period import Period
from tradekit.market.symbol import Symbol
from tradekit.market.tick import Tick
from tradekit.orders.directives import OrderDirectives
from tradekit.orders.order import Order

logger = logging.getLogger(__name__)


class BrokerAccountParameters(BaseModel):
    """Constructor parameters of a broker account."""
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    id: str
    broker: Broker
    owner_name: str
    currency_iso: str
    operativity: AccountOperativity
    creation_date: datetime = Field(default_factory=datetime.utcnow)
    currency_digits: int = Field(default=2, ge=0)
    position_accounting: PositionAccounting = PositionAccounting.HEDGED
    indicative_leverage: float = Field(default=1.0, gt=0)


class BrokerAccount(ABC):
    """
    Abstract broker account.

    Order storage and every order state transition belong to the concrete
    implementation:

        pending --cancel--> canceled
        pending --fill----> open
        open    --close---> closed

    This layer only reads order state to validate derived computations.
    Failures raised by primitives propagate unchanged through the derived
    operations.
    """

    def __init__(self, parameters: BrokerAccountParameters) -> None:
        """
        Initialize broker account.

        Args:
            parameters: Account identity and accounting settings
        """
        self._id = parameters.id
        self._broker = parameters.broker
        self._owner_name = parameters.owner_name
        self._currency_iso = parameters.currency_iso
        self._currency_digits = parameters.currency_digits
        self._operativity = parameters.operativity
        self._creation_date = parameters.creation_date
        self._position_accounting = parameters.position_accounting
        self._indicative_leverage = parameters.indicative_leverage
        self._on_order_update_callback: Optional[Callable[[Order], None]] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def broker(self) -> Broker:
        return self._broker

    @property
    def owner_name(self) -> str:
        return self._owner_name

    @property
    def currency_iso(self) -> str:
        return self._currency_iso

    @property
    def currency_digits(self) -> int:
        return self._currency_digits

    @property
    def operativity(self) -> AccountOperativity:
        """Demo or real account."""
        return self._operativity

    @property
    def creation_date(self) -> datetime:
        return self._creation_date

    @property
    def position_accounting(self) -> PositionAccounting:
        return self._position_accounting

    @property
    def indicative_leverage(self) -> float:
        return self._indicative_leverage

    def set_on_order_update_callback(self, callback: Callable[[Order], None]) -> None:
        """Set callback for order status updates."""
        self._on_order_update_callback = callback

    def _notify_order_update(self, order: Order) -> None:
        if self._on_order_update_callback:
            self._on_order_update_callback(order)

    # ------------------------------------------------------------------
    # Primitive operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_balance(self) -> float:
        """Get account balance."""

    @abstractmethod
    async def get_equity(self) -> float:
        """Get account equity."""

    @abstractmethod
    async def get_used_margin(self) -> float:
        """Get margin currently used by open orders."""

    @abstractmethod
    async def get_orders(self) -> List[Order]:
        """Get every order of the account, whatever its status."""

    @abstractmethod
    async def get_order(self, ticket: int) -> Optional[Order]:
        """
        Get an order.

        Args:
            ticket: Order ticket

        Returns:
            The order, or None if the ticket is unknown
        """

    @abstractmethod
    async def get_order_swaps(self, ticket: int) -> float:
        """Get the swaps of an order (open or closed)."""

    @abstractmethod
    async def get_order_commission(self, ticket: int) -> float:
        """Get the commission of an order (open or closed)."""

    @abstractmethod
    async def place_order(self, directives: OrderDirectives) -> Order:
        """
        Place an order.

        Args:
            directives: Order directives

        Returns:
            The placed order. Market orders are returned once open,
            limit and stop orders once created (pending).
        """

    @abstractmethod
    async def cancel_order(self, ticket: int) -> None:
        """
        Cancel an order.

        Implementations must reject orders not in pending state.
        """

    @abstractmethod
    async def close_order(self, ticket: int) -> None:
        """
        Close an order.

        Implementations must reject orders not in open state.
        """

    @abstractmethod
    async def set_order_stop_loss(self, ticket: int, stop_loss: float) -> None:
        """Set the stop loss of an order."""

    @abstractmethod
    async def set_order_take_profit(self, ticket: int, take_profit: float) -> None:
        """Set the take profit of an order."""

    @abstractmethod
    async def get_symbols(self) -> List[Symbol]:
        """Get the symbols tradable on the account."""

    @abstractmethod
    async def get_symbol(self, symbol: str) -> Optional[Symbol]:
        """Get a symbol by name, or None if not available."""

    @abstractmethod
    async def is_symbol_market_open(self, symbol: str) -> bool:
        """Check if the market of a symbol is open."""

    @abstractmethod
    async def get_symbol_periods(
        self,
        symbol: str,
        timeframe: int,
        price_side: PriceSide = PriceSide.BID,
    ) -> List[Period]:
        """
        Get the most recent periods of a symbol.

        Args:
            symbol: Symbol name
            timeframe: Periods timeframe in seconds
            price_side: Quotation side of the periods

        Returns:
            Periods in chronological order; length is decided by the broker
        """

    @abstractmethod
    async def get_symbol_last_tick(self, symbol: str) -> Tick:
        """Get the last tick of a symbol."""

    @abstractmethod
    async def get_order_net_profit(self, ticket: int) -> float:
        """
        Get the net profit of an order (open or closed).

        Depends on the broker cost model (spread, commission, swaps).
        """

    # ------------------------------------------------------------------
    # Derived operations
    # ------------------------------------------------------------------

    async def get_free_margin(self) -> float:
        """Equity not used as margin."""
        equity = await self.get_equity()
        used_margin = await self.get_used_margin()
        return equity - used_margin

    async def get_margin_level(self) -> float:
        """
        Get equity as a percentage of used margin.

        Returns:
            The margin level, or NaN if no margin is used
        """
        used_margin = await self.get_used_margin()
        if used_margin == 0:
            return math.nan
        return await self.get_equity() / used_margin * 100

    async def get_orders_by_status(self, status: OrderStatus) -> List[Order]:
        return [order for order in await self.get_orders() if order.status == status]

    async def get_pending_orders(self) -> List[Order]:
        return await self.get_orders_by_status(OrderStatus.PENDING)

    async def get_canceled_orders(self) -> List[Order]:
        return await self.get_orders_by_status(OrderStatus.CANCELED)

    async def get_open_orders(self) -> List[Order]:
        return await self.get_orders_by_status(OrderStatus.OPEN)

    async def get_closed_orders(self) -> List[Order]:
        return await self.get_orders_by_status(OrderStatus.CLOSED)

    async def get_order_gross_profit(self, ticket: int) -> float:
        """
        Get the gross profit of an order (open or closed).

        The mark price is the order close price, or the current price on
        the closing side (ask for sells, bid for buys). The price delta is
        scaled by volume and by the current closing-side tick price, which
        is the pricing convention every integration must honour.

        Args:
            ticket: Order ticket

        Raises:
            OrderNotFoundError: If the ticket is unknown
            InvalidOrderStateError: If the order has no open price
        """
        order = await self.get_order(ticket)
        if order is None:
            raise OrderNotFoundError(ticket)
        if order.open_price is None:
            raise InvalidOrderStateError(
                f"Order {ticket} has no open price (status: {order.status.value})",
                ticket=ticket,
            )

        last_tick = await self.get_symbol_last_tick(order.symbol)
        if order.close_price is not None:
            mark_price = order.close_price
        elif order.direction == OrderDirection.SELL:
            mark_price = last_tick.ask
        else:
            mark_price = last_tick.bid

        if order.direction == OrderDirection.SELL:
            return (order.open_price - mark_price) * order.volume * last_tick.ask
        return (mark_price - order.open_price) * order.volume * last_tick.bid

    async def get_symbols_by_type(self, type: SymbolType) -> List[Symbol]:
        return [symbol for symbol in await self.get_symbols() if symbol.type == type]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, broker={self._broker.name!r})"
