"""Symbol quotation value type."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Quotation(BaseModel):
    """Bid/ask prices of a symbol at an instant.

    ``ask >= bid`` is expected from well-behaved feeds but is not enforced.
    Two quotations are equal when symbol, bid and ask match; the timestamp
    does not take part in equality.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    symbol: str
    timestamp: datetime
    bid: float
    ask: float

    @property
    def mid(self) -> float:
        """Mid price between bid and ask."""
        return (self.bid + self.ask) / 2

    @property
    def spread(self) -> float:
        """Ask minus bid."""
        return self.ask - self.bid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quotation):
            return NotImplemented
        return (
            self.symbol == other.symbol
            and self.bid == other.bid
            and self.ask == other.ask
        )

    def __hash__(self) -> int:
        return hash((self.symbol, self.bid, self.ask))
