"""Market data value types and the tick aggregation engine."""

from tradekit.market.aggregation import periods_from_ticks
from tradekit.market.period import Period
from tradekit.market.quotation import Quotation
from tradekit.market.symbol import Symbol
from tradekit.market.tick import Tick, link_ticks

__all__ = [
    "Period",
    "Quotation",
    "Symbol",
    "Tick",
    "link_ticks",
    "periods_from_ticks",
]
