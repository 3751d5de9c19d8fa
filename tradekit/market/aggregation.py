"""
Tick to Period Aggregation
Folds an ordered tick stream into fixed-width OHLCV periods.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from tradekit.core.enums import PriceSide
from tradekit.market.period import Period
from tradekit.market.tick import Tick

logger = logging.getLogger(__name__)


def _is_aware(timestamp: datetime) -> bool:
    return timestamp.tzinfo is not None and timestamp.utcoffset() is not None


def _compose_period(
    symbol: str,
    start_time: datetime,
    timeframe: int,
    price_side: PriceSide,
    bucket: Sequence[Tick],
) -> Period:
    prices = [tick.price(price_side) for tick in bucket]
    return Period(
        symbol=symbol,
        start_time=start_time,
        timeframe=timeframe,
        price_side=price_side,
        open=prices[0],
        high=max(prices),
        low=min(prices),
        close=prices[-1],
        volume=len(bucket),
        ticks=tuple(bucket),
    )


def periods_from_ticks(
    ticks: Sequence[Tick],
    start_time: datetime,
    timeframe: int,
    price_side: PriceSide = PriceSide.BID,
    limit: Optional[int] = None,
) -> List[Period]:
    """
    Compose periods from a sequence of ticks.

    Ticks must already be sorted by timestamp; they are never re-sorted and
    the input is never mutated. Ticks before ``start_time`` are skipped. The
    window advances one timeframe at a time, so gaps in the stream become
    skipped windows and never produce empty periods. A tick falling exactly
    on a window end is kept in that window.

    Malformed input degrades to an empty or partial result instead of
    raising: ticks whose timestamps cannot be compared with ``start_time``
    (naive against aware) are skipped.

    Args:
        ticks: Ticks sorted ascending by timestamp
        start_time: Start time of the first window
        timeframe: Window width in seconds
        price_side: Quotation side used for every price
        limit: Maximum number of periods; None or negative for no cap

    Returns:
        Periods in chronological order
    """
    if not ticks or timeframe <= 0 or not isinstance(start_time, datetime):
        return []

    bounded = limit is not None and limit >= 0
    step = timedelta(seconds=timeframe)
    symbol = ticks[0].symbol

    periods: List[Period] = []
    bucket: List[Tick] = []
    window_start = start_time
    window_end = window_start + step
    aware = _is_aware(start_time)
    skipped = 0
    incomparable = 0

    for tick in ticks:
        if bounded and len(periods) >= limit:
            return periods

        if _is_aware(tick.timestamp) != aware:
            incomparable += 1
            continue

        if tick.timestamp < window_start:
            skipped += 1
            continue

        bucket_start = window_start
        advanced = False
        while tick.timestamp > window_end:
            window_start = window_end
            window_end = window_start + step
            advanced = True

        if advanced and bucket:
            periods.append(_compose_period(symbol, bucket_start, timeframe, price_side, bucket))
            bucket = []

        bucket.append(tick)

    if bucket and not (bounded and len(periods) >= limit):
        periods.append(_compose_period(symbol, window_start, timeframe, price_side, bucket))

    if skipped:
        logger.debug(f"Skipped {skipped} ticks before {start_time} for {symbol}")
    if incomparable:
        logger.debug(
            f"Skipped {incomparable} ticks for {symbol} mixing naive and aware timestamps"
        )

    return periods
