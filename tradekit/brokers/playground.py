"""
Playground Broker
In-memory broker account driven by pushed ticks.

Implements the whole account contract without any I/O. Market orders fill
on the last tick, limit and stop orders wait for a tick crossing their
price, stop loss and take profit are checked on every tick.
"""

import itertools
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Literal, Optional

from tradekit.brokers.account import BrokerAccount, BrokerAccountParameters
from tradekit.brokers.broker import Broker
from tradekit.config import PlaygroundSettings, get_settings
from tradekit.core.enums import (
    AccountOperativity,
    OrderDirection,
    OrderPurpose,
    OrderStatus,
    PositionAccounting,
    PriceSide,
)
from tradekit.core.errors import (
    MarketDataUnavailableError,
    OrderError,
    OrderNotFoundError,
    SymbolNotFoundError,
)
from tradekit.market.aggregation import periods_from_ticks
from tradekit.market.period import Period
from tradekit.market.symbol import Symbol
from tradekit.market.tick import Tick
from tradekit.orders.directives import (
    ClosePositionDirectives,
    IncreasePositionDirectives,
    OpenPositionDirectives,
    OrderDirectives,
)
from tradekit.orders.order import Order

logger = logging.getLogger(__name__)

_VOLUME_TOLERANCE = 1e-9

PendingKind = Literal["limit", "stop"]


def _floor_to_timeframe(timestamp: datetime, timeframe: int) -> datetime:
    """Floor a timestamp to a timeframe boundary counted from midnight."""
    midnight = timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (timestamp - midnight).total_seconds()
    return midnight + timedelta(seconds=elapsed - elapsed % timeframe)


class PlaygroundBrokerAccount(BrokerAccount):
    """
    Simulated hedged account.

    Every open-purpose order starts its own position identified by the
    ticket of the order; increase directives add orders to an existing
    position, close directives close a position oldest order first.
    """

    def __init__(
        self,
        parameters: BrokerAccountParameters,
        settings: Optional[PlaygroundSettings] = None,
        balance: Optional[float] = None,
    ) -> None:
        """
        Initialize playground account.

        Args:
            parameters: Account identity
            settings: Playground settings (defaults to global settings)
            balance: Starting balance (defaults to settings.initial_balance)
        """
        super().__init__(parameters)
        self._settings = settings or get_settings().playground
        self._balance = self._settings.initial_balance if balance is None else balance
        self._tickets = itertools.count(1)
        self._orders: Dict[int, Order] = {}
        self._pending_kinds: Dict[int, PendingKind] = {}
        self._symbols: Dict[str, Symbol] = {}
        self._market_open: Dict[str, bool] = {}
        self._ticks: Dict[str, List[Tick]] = {}

    # ------------------------------------------------------------------
    # Playground controls
    # ------------------------------------------------------------------

    def register_symbol(self, symbol: Symbol, market_open: bool = True) -> None:
        """Make a symbol tradable on the account."""
        self._symbols[symbol.symbol] = symbol
        self._market_open[symbol.symbol] = market_open
        self._ticks.setdefault(symbol.symbol, [])

    def set_symbol_market_open(self, symbol: str, market_open: bool) -> None:
        self._require_symbol(symbol)
        self._market_open[symbol] = market_open

    def deposit(self, amount: float) -> None:
        if amount <= 0:
            raise ValueError(f"Deposit amount must be positive, got {amount}")
        self._balance += amount
        logger.info(f"Deposited {amount} {self.currency_iso} on account {self.id}")

    async def push_tick(self, tick: Tick) -> None:
        """
        Feed a tick to the account.

        Fills crossed pending orders, then closes open orders whose stop
        loss or take profit is reached. While the symbol market is closed
        the tick is only recorded.
        """
        self._require_symbol(tick.symbol)
        self._ticks[tick.symbol].append(tick)

        if not self._market_open[tick.symbol]:
            return

        for order in list(self._orders.values()):
            if order.symbol == tick.symbol and order.status == OrderStatus.PENDING:
                if self._is_triggered(order, tick):
                    self._fill(order, tick)

        for order in list(self._orders.values()):
            if order.symbol == tick.symbol and self._is_position_order(order):
                if self._is_protection_hit(order, tick):
                    await self._settle(order, tick, order.volume)

    # ------------------------------------------------------------------
    # Account metrics
    # ------------------------------------------------------------------

    async def get_balance(self) -> float:
        return self._balance

    async def get_equity(self) -> float:
        equity = self._balance
        for order in self._open_position_orders():
            equity += await self.get_order_net_profit(order.ticket)
        return equity

    async def get_used_margin(self) -> float:
        leverage = self._settings.leverage
        return sum(
            order.volume * order.open_price / leverage
            for order in self._open_position_orders()
        )

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def get_orders(self) -> List[Order]:
        return [order.model_copy() for order in self._orders.values()]

    async def get_order(self, ticket: int) -> Optional[Order]:
        order = self._orders.get(ticket)
        return order.model_copy() if order is not None else None

    async def get_order_swaps(self, ticket: int) -> float:
        self._require_order(ticket)
        return 0.0

    async def get_order_commission(self, ticket: int) -> float:
        order = self._require_order(ticket)
        if order.purpose != OrderPurpose.OPEN or order.open_price is None:
            return 0.0
        return self._settings.commission_per_lot * order.volume

    async def get_order_net_profit(self, ticket: int) -> float:
        gross = await self.get_order_gross_profit(ticket)
        commission = await self.get_order_commission(ticket)
        swaps = await self.get_order_swaps(ticket)
        return gross - commission + swaps

    async def place_order(self, directives: OrderDirectives) -> Order:
        if isinstance(directives, OpenPositionDirectives):
            order = self._open_position(directives)
        elif isinstance(directives, IncreasePositionDirectives):
            order = self._increase_position(directives)
        elif isinstance(directives, ClosePositionDirectives):
            order = await self._close_position(directives)
        else:
            raise TypeError(f"Unsupported order directives: {type(directives).__name__}")
        return order.model_copy()

    async def cancel_order(self, ticket: int) -> None:
        order = self._require_order(ticket)
        if order.status != OrderStatus.PENDING:
            raise OrderError(
                f"Only pending orders can be canceled (order {ticket} is {order.status.value})",
                order.model_copy(),
            )

        order.status = OrderStatus.CANCELED
        order.cancel_time = datetime.utcnow()
        self._pending_kinds.pop(ticket, None)

        logger.info(f"Order canceled: {ticket}")
        self._notify_order_update(order.model_copy())

    async def close_order(self, ticket: int) -> None:
        order = self._require_order(ticket)
        if order.status != OrderStatus.OPEN or order.purpose != OrderPurpose.OPEN:
            raise OrderError(
                f"Only open orders can be closed (order {ticket} is {order.status.value})",
                order.model_copy(),
            )
        self._require_market_open(order.symbol)
        await self._settle(order, self._last_tick(order.symbol), order.volume)

    async def set_order_stop_loss(self, ticket: int, stop_loss: float) -> None:
        order = self._require_modifiable(ticket)
        order.stop_loss = stop_loss
        logger.info(f"Order {ticket} stop loss set to {stop_loss}")
        self._notify_order_update(order.model_copy())

    async def set_order_take_profit(self, ticket: int, take_profit: float) -> None:
        order = self._require_modifiable(ticket)
        order.take_profit = take_profit
        logger.info(f"Order {ticket} take profit set to {take_profit}")
        self._notify_order_update(order.model_copy())

    # ------------------------------------------------------------------
    # Symbols and market data
    # ------------------------------------------------------------------

    async def get_symbols(self) -> List[Symbol]:
        return list(self._symbols.values())

    async def get_symbol(self, symbol: str) -> Optional[Symbol]:
        return self._symbols.get(symbol)

    async def is_symbol_market_open(self, symbol: str) -> bool:
        self._require_symbol(symbol)
        return self._market_open[symbol]

    async def get_symbol_periods(
        self,
        symbol: str,
        timeframe: int,
        price_side: PriceSide = PriceSide.BID,
    ) -> List[Period]:
        self._require_symbol(symbol)
        ticks = self._ticks[symbol]
        if not ticks or timeframe <= 0:
            return []
        start_time = _floor_to_timeframe(ticks[0].timestamp, timeframe)
        return periods_from_ticks(ticks, start_time, timeframe, price_side)

    async def get_symbol_last_tick(self, symbol: str) -> Tick:
        return self._last_tick(symbol)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_symbol(self, symbol: str) -> Symbol:
        if symbol not in self._symbols:
            raise SymbolNotFoundError(symbol)
        return self._symbols[symbol]

    def _require_market_open(self, symbol: str) -> None:
        self._require_symbol(symbol)
        if not self._market_open[symbol]:
            raise OrderError(f"Market is closed for {symbol}")

    def _require_order(self, ticket: int) -> Order:
        order = self._orders.get(ticket)
        if order is None:
            raise OrderNotFoundError(ticket)
        return order

    def _require_modifiable(self, ticket: int) -> Order:
        order = self._require_order(ticket)
        if order.is_terminal or order.purpose != OrderPurpose.OPEN:
            raise OrderError(
                f"Order {ticket} cannot be modified (status: {order.status.value})",
                order.model_copy(),
            )
        return order

    def _last_tick(self, symbol: str) -> Tick:
        self._require_symbol(symbol)
        ticks = self._ticks[symbol]
        if not ticks:
            raise MarketDataUnavailableError(symbol)
        return ticks[-1]

    @staticmethod
    def _is_position_order(order: Order) -> bool:
        return order.status == OrderStatus.OPEN and order.purpose == OrderPurpose.OPEN

    def _open_position_orders(self) -> List[Order]:
        return [order for order in self._orders.values() if self._is_position_order(order)]

    def _position_orders(self, position_id: str) -> List[Order]:
        orders = [
            order for order in self._open_position_orders()
            if order.position_id == position_id
        ]
        if not orders:
            raise OrderError(f"No open position with id {position_id}")
        return sorted(orders, key=lambda order: order.ticket)

    def _check_volume(self, symbol: Symbol, volume: float) -> None:
        if volume < symbol.min_lots or volume > symbol.max_lots:
            raise OrderError(
                f"Volume {volume} outside [{symbol.min_lots}, {symbol.max_lots}] for {symbol.symbol}"
            )

    def _new_order(self, **fields) -> Order:
        order = Order(ticket=next(self._tickets), **fields)
        self._orders[order.ticket] = order
        return order

    def _open_position(self, directives: OpenPositionDirectives) -> Order:
        symbol = self._require_symbol(directives.symbol)
        self._require_market_open(directives.symbol)
        self._check_volume(symbol, directives.volume)
        tick = self._last_tick(directives.symbol)

        protection = directives.protection
        requested = directives.limit if directives.limit is not None else directives.stop
        order = self._new_order(
            symbol=directives.symbol,
            direction=directives.direction,
            volume=directives.volume,
            requested_open_price=requested,
            stop_loss=protection.stop_loss if protection else None,
            take_profit=protection.take_profit if protection else None,
        )
        order.position_id = str(order.ticket)

        if directives.is_market:
            self._fill(order, tick)
        else:
            self._pending_kinds[order.ticket] = "limit" if directives.limit is not None else "stop"
            logger.info(
                f"Order pending: {order.direction.value} {order.volume} {order.symbol} "
                f"{self._pending_kinds[order.ticket]} @ {requested} (ticket {order.ticket})"
            )
            self._notify_order_update(order.model_copy())
        return order

    def _increase_position(self, directives: IncreasePositionDirectives) -> Order:
        reference = self._position_orders(directives.position_id)[0]
        symbol = self._require_symbol(reference.symbol)
        self._require_market_open(reference.symbol)
        self._check_volume(symbol, directives.volume)
        tick = self._last_tick(reference.symbol)

        order = self._new_order(
            symbol=reference.symbol,
            direction=reference.direction,
            volume=directives.volume,
            position_id=directives.position_id,
        )
        self._fill(order, tick)
        return order

    async def _close_position(self, directives: ClosePositionDirectives) -> Order:
        orders = self._position_orders(directives.position_id)
        reference = orders[0]
        self._require_market_open(reference.symbol)
        tick = self._last_tick(reference.symbol)

        total = sum(order.volume for order in orders)
        volume = total if directives.volume is None else directives.volume
        if volume > total and not math.isclose(volume, total, abs_tol=_VOLUME_TOLERANCE):
            raise OrderError(
                f"Cannot close {volume} of position {directives.position_id} (volume {total})"
            )

        price = self._closing_price(reference.direction, tick)
        closing = self._new_order(
            symbol=reference.symbol,
            direction=reference.direction.opposite,
            purpose=OrderPurpose.CLOSE,
            volume=volume,
            position_id=directives.position_id,
            open_price=price,
            close_price=price,
            open_time=tick.timestamp,
            close_time=tick.timestamp,
            status=OrderStatus.CLOSED,
        )

        remaining = volume
        for order in orders:
            if remaining <= _VOLUME_TOLERANCE:
                break
            taken = min(remaining, order.volume)
            await self._settle(order, tick, taken)
            remaining -= taken

        logger.info(f"Position {directives.position_id} closed for {volume} @ {price}")
        self._notify_order_update(closing.model_copy())
        return closing

    @staticmethod
    def _closing_price(direction: OrderDirection, tick: Tick) -> float:
        return tick.bid if direction == OrderDirection.BUY else tick.ask

    def _is_triggered(self, order: Order, tick: Tick) -> bool:
        price = order.requested_open_price
        kind = self._pending_kinds.get(order.ticket)
        if price is None or kind is None:
            return False
        if kind == "limit":
            return tick.ask <= price if order.is_buy else tick.bid >= price
        return tick.ask >= price if order.is_buy else tick.bid <= price

    def _is_protection_hit(self, order: Order, tick: Tick) -> bool:
        price = self._closing_price(order.direction, tick)
        if order.is_buy:
            stop_hit = order.stop_loss is not None and price <= order.stop_loss
            target_hit = order.take_profit is not None and price >= order.take_profit
        else:
            stop_hit = order.stop_loss is not None and price >= order.stop_loss
            target_hit = order.take_profit is not None and price <= order.take_profit
        return stop_hit or target_hit

    def _fill(self, order: Order, tick: Tick) -> None:
        order.open_price = tick.ask if order.is_buy else tick.bid
        order.open_time = tick.timestamp
        order.status = OrderStatus.OPEN
        self._pending_kinds.pop(order.ticket, None)

        logger.info(
            f"Order filled: {order.direction.value} {order.volume} {order.symbol} "
            f"@ {order.open_price} (ticket {order.ticket})"
        )
        self._notify_order_update(order.model_copy())

    async def _settle(self, order: Order, tick: Tick, volume: float) -> None:
        """Close ``volume`` of an open order and realize its net profit."""
        if not math.isclose(volume, order.volume, abs_tol=_VOLUME_TOLERANCE):
            # Partial close: split the closed part into its own order.
            order.volume -= volume
            order = self._new_order(
                symbol=order.symbol,
                direction=order.direction,
                volume=volume,
                position_id=order.position_id,
                open_price=order.open_price,
                open_time=order.open_time,
                status=OrderStatus.OPEN,
            )

        order.close_price = self._closing_price(order.direction, tick)
        order.close_time = tick.timestamp
        order.status = OrderStatus.CLOSED

        realized = await self.get_order_net_profit(order.ticket)
        self._balance += realized

        logger.info(
            f"Order closed: {order.symbol} {order.volume} @ {order.close_price} "
            f"(ticket {order.ticket}, net profit {realized})"
        )
        self._notify_order_update(order.model_copy())


class PlaygroundBroker(Broker):
    """Broker handing out in-memory playground accounts."""

    def __init__(self, settings: Optional[PlaygroundSettings] = None) -> None:
        super().__init__(name="Playground", legal_name="Playground Broker")
        self._settings = settings or get_settings().playground

    async def login(
        self,
        id: str = "playground",
        owner_name: str = "Playground",
        balance: Optional[float] = None,
    ) -> PlaygroundBrokerAccount:
        parameters = BrokerAccountParameters(
            id=id,
            broker=self,
            owner_name=owner_name,
            currency_iso=self._settings.currency_iso,
            currency_digits=self._settings.currency_digits,
            operativity=AccountOperativity.DEMO,
            position_accounting=PositionAccounting.HEDGED,
            indicative_leverage=self._settings.leverage,
        )
        logger.info(f"Logged into playground account {id}")
        return PlaygroundBrokerAccount(parameters, settings=self._settings, balance=balance)
