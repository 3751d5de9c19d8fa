from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from tradekit.brokers.account import BrokerAccountParameters
from tradekit.brokers.playground import PlaygroundBroker, PlaygroundBrokerAccount
from tradekit.config import PlaygroundSettings
from tradekit.core.enums import (
    AccountOperativity,
    OrderDirection,
    OrderPurpose,
    OrderStatus,
    SymbolType,
)
from tradekit.core.errors import (
    InvalidOrderStateError,
    MarketDataUnavailableError,
    OrderError,
    SymbolNotFoundError,
)
from tradekit.market.symbol import Symbol
from tradekit.market.tick import Tick
from tradekit.orders.directives import (
    ClosePositionDirectives,
    IncreasePositionDirectives,
    OpenPositionDirectives,
    PositionProtection,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
EURUSD = Symbol(symbol="EURUSD", type=SymbolType.FOREX, base_asset="EUR", quote_asset="USD")


def _settings(**overrides) -> PlaygroundSettings:
    fields = dict(initial_balance=10_000.0, leverage=10.0, commission_per_lot=0.0)
    fields.update(overrides)
    return PlaygroundSettings(**fields)


def _account(**settings) -> PlaygroundBrokerAccount:
    broker = PlaygroundBroker(_settings(**settings))
    account = PlaygroundBrokerAccount(
        BrokerAccountParameters(
            id="pg-1",
            broker=broker,
            owner_name="Tester",
            currency_iso="USD",
            operativity=AccountOperativity.DEMO,
        ),
        settings=_settings(**settings),
    )
    account.register_symbol(EURUSD)
    return account


def _tick(bid: float, ask: float, seconds: float = 0) -> Tick:
    return Tick(symbol="EURUSD", timestamp=T0 + timedelta(seconds=seconds), bid=bid, ask=ask)


def _buy(volume: float = 1.0, **fields) -> OpenPositionDirectives:
    return OpenPositionDirectives(symbol="EURUSD", direction=OrderDirection.BUY, volume=volume, **fields)


def _sell(volume: float = 1.0, **fields) -> OpenPositionDirectives:
    return OpenPositionDirectives(symbol="EURUSD", direction=OrderDirection.SELL, volume=volume, **fields)


@pytest.mark.asyncio
async def test_login_returns_demo_account() -> None:
    broker = PlaygroundBroker(_settings(currency_iso="EUR"))

    account = await broker.login(id="demo-7", owner_name="Grace", balance=500.0)

    assert account.broker is broker
    assert account.id == "demo-7"
    assert account.currency_iso == "EUR"
    assert account.operativity == AccountOperativity.DEMO
    assert await account.get_balance() == 500.0


@pytest.mark.asyncio
async def test_market_buy_opens_at_ask() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))

    order = await account.place_order(_buy())

    assert order.status == OrderStatus.OPEN
    assert order.open_price == 1.1002
    assert order.position_id == str(order.ticket)
    assert [o.ticket for o in await account.get_open_orders()] == [order.ticket]


@pytest.mark.asyncio
async def test_market_sell_opens_at_bid() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))

    order = await account.place_order(_sell())

    assert order.open_price == 1.1000


@pytest.mark.asyncio
async def test_limit_order_waits_for_crossing_tick() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))

    order = await account.place_order(_buy(limit=1.0990))
    assert order.status == OrderStatus.PENDING
    assert order.requested_open_price == 1.0990

    await account.push_tick(_tick(1.0993, 1.0995, seconds=1))
    assert (await account.get_order(order.ticket)).status == OrderStatus.PENDING

    await account.push_tick(_tick(1.0985, 1.0988, seconds=2))
    filled = await account.get_order(order.ticket)
    assert filled.status == OrderStatus.OPEN
    assert filled.open_price == 1.0988


@pytest.mark.asyncio
async def test_sell_stop_triggers_when_bid_falls() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))

    order = await account.place_order(_sell(stop=1.0950))
    await account.push_tick(_tick(1.0949, 1.0951, seconds=1))

    filled = await account.get_order(order.ticket)
    assert filled.status == OrderStatus.OPEN
    assert filled.open_price == 1.0949


@pytest.mark.asyncio
async def test_cancel_only_pending_orders() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    pending = await account.place_order(_buy(limit=1.05))
    opened = await account.place_order(_buy())

    await account.cancel_order(pending.ticket)

    assert (await account.get_order(pending.ticket)).status == OrderStatus.CANCELED
    with pytest.raises(OrderError):
        await account.cancel_order(pending.ticket)
    with pytest.raises(OrderError):
        await account.cancel_order(opened.ticket)


@pytest.mark.asyncio
async def test_close_only_open_orders() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    pending = await account.place_order(_buy(limit=1.05))

    with pytest.raises(OrderError):
        await account.close_order(pending.ticket)


@pytest.mark.asyncio
async def test_close_order_realizes_profit() -> None:
    account = _account(commission_per_lot=2.0)
    await account.push_tick(_tick(1.1000, 1.1002))
    order = await account.place_order(_buy())

    await account.push_tick(_tick(1.1102, 1.1104, seconds=5))
    await account.close_order(order.ticket)

    closed = await account.get_order(order.ticket)
    assert closed.status == OrderStatus.CLOSED
    assert closed.close_price == 1.1102
    expected = (1.1102 - 1.1002) * 1.0 * 1.1102 - 2.0
    assert await account.get_balance() == pytest.approx(10_000.0 + expected)
    assert await account.get_order_commission(order.ticket) == 2.0
    with pytest.raises(OrderError):
        await account.close_order(order.ticket)


@pytest.mark.asyncio
async def test_equity_and_margin_metrics() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    assert math.isnan(await account.get_margin_level())

    await account.place_order(_buy())
    await account.push_tick(_tick(1.1050, 1.1052, seconds=1))

    used_margin = 1.1002 / 10.0
    equity = 10_000.0 + (1.1050 - 1.1002) * 1.1050
    assert await account.get_used_margin() == pytest.approx(used_margin)
    assert await account.get_equity() == pytest.approx(equity)
    assert await account.get_free_margin() == pytest.approx(equity - used_margin)
    assert await account.get_margin_level() == pytest.approx(equity / used_margin * 100)


@pytest.mark.asyncio
async def test_stop_loss_closes_buy_against_bid() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    order = await account.place_order(_buy(protection=PositionProtection(stop_loss=1.0950)))

    await account.push_tick(_tick(1.0940, 1.0942, seconds=1))

    closed = await account.get_order(order.ticket)
    assert closed.status == OrderStatus.CLOSED
    assert closed.close_price == 1.0940
    assert await account.get_balance() < 10_000.0


@pytest.mark.asyncio
async def test_take_profit_closes_sell_against_ask() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    order = await account.place_order(_sell())
    await account.set_order_take_profit(order.ticket, 1.0900)

    await account.push_tick(_tick(1.0888, 1.0890, seconds=1))

    closed = await account.get_order(order.ticket)
    assert closed.status == OrderStatus.CLOSED
    assert closed.close_price == 1.0890
    assert await account.get_balance() > 10_000.0


@pytest.mark.asyncio
async def test_partial_close_splits_position() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    order = await account.place_order(_buy(volume=2.0))

    closing = await account.place_order(
        ClosePositionDirectives(position_id=order.position_id, volume=0.5)
    )

    assert closing.purpose == OrderPurpose.CLOSE
    assert closing.direction == OrderDirection.SELL
    assert closing.status == OrderStatus.CLOSED
    remaining = await account.get_order(order.ticket)
    assert remaining.status == OrderStatus.OPEN
    assert remaining.volume == 1.5
    split = [o for o in await account.get_closed_orders() if o.purpose == OrderPurpose.OPEN]
    assert [o.volume for o in split] == [0.5]
    assert split[0].position_id == order.position_id


@pytest.mark.asyncio
async def test_increase_then_close_whole_position() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    first = await account.place_order(_buy())

    added = await account.place_order(
        IncreasePositionDirectives(position_id=first.position_id, volume=0.5)
    )
    assert added.position_id == first.position_id
    assert added.direction == OrderDirection.BUY
    assert added.status == OrderStatus.OPEN

    closing = await account.place_order(ClosePositionDirectives(position_id=first.position_id))

    assert closing.volume == 1.5
    assert await account.get_open_orders() == []
    with pytest.raises(OrderError):
        await account.place_order(ClosePositionDirectives(position_id=first.position_id))


@pytest.mark.asyncio
async def test_closed_market_rejects_orders() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    account.set_symbol_market_open("EURUSD", False)

    assert not await account.is_symbol_market_open("EURUSD")
    with pytest.raises(OrderError, match="Market is closed"):
        await account.place_order(_buy())


@pytest.mark.asyncio
async def test_volume_outside_symbol_lots_is_rejected() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))

    with pytest.raises(OrderError):
        await account.place_order(_buy(volume=500.0))


@pytest.mark.asyncio
async def test_unknown_symbol_and_missing_market_data() -> None:
    account = _account()

    with pytest.raises(SymbolNotFoundError):
        await account.get_symbol_last_tick("GBPUSD")
    with pytest.raises(MarketDataUnavailableError):
        await account.get_symbol_last_tick("EURUSD")
    with pytest.raises(MarketDataUnavailableError):
        await account.place_order(_buy())
    assert await account.get_symbol("GBPUSD") is None
    assert await account.get_symbols() == [EURUSD]


@pytest.mark.asyncio
async def test_gross_profit_of_pending_order_is_invalid() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    pending = await account.place_order(_buy(limit=1.05))

    with pytest.raises(InvalidOrderStateError):
        await account.get_order_net_profit(pending.ticket)


@pytest.mark.asyncio
async def test_symbol_periods_aggregate_pushed_ticks() -> None:
    account = _account()
    for seconds, bid in [(3, 1.10), (30, 1.12), (59, 1.11), (70, 1.13)]:
        await account.push_tick(_tick(bid, bid + 0.0002, seconds=seconds))

    periods = await account.get_symbol_periods("EURUSD", 60)

    assert [period.start_time for period in periods] == [T0, T0 + timedelta(seconds=60)]
    assert periods[0].ohlcv == (1.10, 1.12, 1.10, 1.11, 3)
    assert periods[1].volume == 1


@pytest.mark.asyncio
async def test_order_updates_reach_callback() -> None:
    account = _account()
    updates = []
    account.set_on_order_update_callback(lambda order: updates.append(order.status))
    await account.push_tick(_tick(1.1000, 1.1002))

    pending = await account.place_order(_buy(limit=1.05))
    await account.cancel_order(pending.ticket)

    assert updates == [OrderStatus.PENDING, OrderStatus.CANCELED]


@pytest.mark.asyncio
async def test_returned_orders_are_copies() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    order = await account.place_order(_buy())

    order.stop_loss = 0.5

    assert (await account.get_order(order.ticket)).stop_loss is None


@pytest.mark.asyncio
async def test_used_margin_ignores_lot_units() -> None:
    account = _account(initial_balance=1_000.0)
    account.register_symbol(
        Symbol(symbol="EURUSD", type=SymbolType.FOREX, lot_units=100_000, min_lots=0.01)
    )
    await account.push_tick(_tick(1.1000, 1.1002))

    await account.place_order(_buy())

    used_margin = await account.get_used_margin()
    equity = await account.get_equity()
    assert used_margin == pytest.approx(1.1002 / 10.0)
    assert await account.get_free_margin() == pytest.approx(equity - used_margin)
    assert await account.get_margin_level() == pytest.approx(equity / used_margin * 100)


@pytest.mark.asyncio
async def test_closed_market_only_records_ticks() -> None:
    account = _account()
    await account.push_tick(_tick(1.1000, 1.1002))
    pending = await account.place_order(_buy(limit=1.0990))
    protected = await account.place_order(_buy(protection=PositionProtection(stop_loss=1.0950)))
    account.set_symbol_market_open("EURUSD", False)

    crossing = _tick(1.0940, 1.0942, seconds=1)
    await account.push_tick(crossing)

    assert (await account.get_order(pending.ticket)).status == OrderStatus.PENDING
    assert (await account.get_order(protected.ticket)).status == OrderStatus.OPEN
    assert await account.get_symbol_last_tick("EURUSD") == crossing
    assert await account.get_balance() == 10_000.0

    account.set_symbol_market_open("EURUSD", True)
    await account.push_tick(_tick(1.0940, 1.0942, seconds=2))

    assert (await account.get_order(pending.ticket)).status == OrderStatus.OPEN
    assert (await account.get_order(protected.ticket)).status == OrderStatus.CLOSED
