"""Dataframe adapters for tick input and period output."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from tradekit.market.period import Period
from tradekit.market.tick import Tick, link_ticks

REQUIRED_TICK_COLUMNS: tuple[str, ...] = ("bid", "ask")
PERIOD_COLUMNS: tuple[str, ...] = (
    "start_time",
    "end_time",
    "open",
    "high",
    "low",
    "close",
    "volume",
)


def ticks_from_frame(symbol: str, frame: object) -> list[Tick]:
    """Convert a dataframe-like object of bid/ask rows into sorted, linked ticks.

    The timestamp may be a column or the index.
    """
    if not hasattr(frame, "columns"):
        raise TypeError("frame must be a dataframe-like object with columns")

    columns = set(getattr(frame, "columns"))
    missing = [column for column in REQUIRED_TICK_COLUMNS if column not in columns]
    if missing:
        raise ValueError(f"Missing required columns for {symbol}: {missing}")

    if "timestamp" not in columns:
        if not hasattr(frame, "reset_index"):
            raise ValueError("Dataframe must provide a timestamp column or index")
        frame = frame.reset_index()
        columns = set(getattr(frame, "columns"))
    if "timestamp" not in columns:
        raise ValueError("Dataframe must contain timestamp values")

    if hasattr(frame, "sort_values"):
        frame = frame.sort_values("timestamp")

    ticks: list[Tick] = []
    for row in frame.to_dict(orient="records"):
        ts = row["timestamp"]
        if hasattr(ts, "to_pydatetime"):
            ts = ts.to_pydatetime()
        if not isinstance(ts, datetime):
            raise TypeError(f"timestamp must be datetime-like for {symbol}")
        ticks.append(
            Tick(
                symbol=symbol,
                timestamp=ts,
                bid=float(row["bid"]),
                ask=float(row["ask"]),
            )
        )
    return link_ticks(ticks)


def periods_to_frame(periods: Sequence[Period]):
    """Render periods as a pandas DataFrame indexed by start time."""
    # Lazily import pandas to keep the core free of the dependency.
    import pandas as pd

    records = [
        {
            "start_time": period.start_time,
            "end_time": period.end_time,
            "open": period.open,
            "high": period.high,
            "low": period.low,
            "close": period.close,
            "volume": period.volume,
        }
        for period in periods
    ]
    frame = pd.DataFrame.from_records(records, columns=list(PERIOD_COLUMNS))
    return frame.set_index("start_time")
