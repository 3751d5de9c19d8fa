"""Symbol period (bar or candlestick) value type."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from tradekit.core.enums import PriceSide
from tradekit.market.tick import Tick


class Period(BaseModel):
    """OHLCV summary of a symbol over a fixed time window.

    Two periods are the same period when symbol, start time and timeframe
    match, whatever their prices.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    symbol: str
    start_time: datetime
    timeframe: int = Field(gt=0)  # seconds
    price_side: PriceSide = PriceSide.BID
    open: float
    high: float
    low: float
    close: float
    volume: int = Field(ge=0)
    ticks: Optional[tuple[Tick, ...]] = None

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(seconds=self.timeframe)

    @property
    def momentum(self) -> float:
        """Close relative to open; non-finite when open is zero."""
        if self.open == 0:
            if self.close == 0:
                return math.nan
            return math.copysign(math.inf, self.close)
        return self.close / self.open

    @property
    def body(self) -> float:
        return self.close - self.open

    @property
    def abs_body(self) -> float:
        return abs(self.body)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def ohlc(self) -> tuple[float, float, float, float]:
        return (self.open, self.high, self.low, self.close)

    @property
    def ohlcv(self) -> tuple[float, float, float, float, int]:
        return (*self.ohlc, self.volume)

    @property
    def is_bearish(self) -> bool:
        return self.body < 0

    @property
    def is_neutral(self) -> bool:
        return self.body == 0

    @property
    def is_bullish(self) -> bool:
        return self.body > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return (
            self.symbol == other.symbol
            and self.start_time == other.start_time
            and self.timeframe == other.timeframe
        )

    def __hash__(self) -> int:
        return hash((self.symbol, self.start_time, self.timeframe))

    @classmethod
    def from_ticks(
        cls,
        ticks: Sequence[Tick],
        start_time: datetime,
        timeframe: int,
        price_side: PriceSide = PriceSide.BID,
        limit: Optional[int] = None,
    ) -> list[Period]:
        """Compose periods from ticks. See ``periods_from_ticks``."""
        from tradekit.market.aggregation import periods_from_ticks

        return periods_from_ticks(ticks, start_time, timeframe, price_side, limit)
