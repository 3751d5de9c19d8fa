"""Symbol tick value type and chaining helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tradekit.core.enums import PriceSide
from tradekit.market.quotation import Quotation


class Tick(BaseModel):
    """A single quotation event.

    A tick may be built from a ``quotation`` or from flat ``symbol``, ``bid``,
    ``ask`` and ``timestamp`` values. Neighbouring ticks are referenced by
    their position in the owning sequence, never embedded, so a tick does not
    keep its neighbours alive.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    quotation: Quotation
    previous_position: Optional[int] = Field(default=None, ge=0)
    next_position: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _build_quotation(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "quotation" in data:
            return data
        data = dict(data)
        data["quotation"] = {
            key: data.pop(key)
            for key in ("symbol", "timestamp", "bid", "ask")
            if key in data
        }
        return data

    @property
    def symbol(self) -> str:
        return self.quotation.symbol

    @property
    def timestamp(self) -> datetime:
        return self.quotation.timestamp

    @property
    def bid(self) -> float:
        return self.quotation.bid

    @property
    def ask(self) -> float:
        return self.quotation.ask

    @property
    def mid(self) -> float:
        return self.quotation.mid

    @property
    def spread(self) -> float:
        return self.quotation.spread

    def price(self, side: PriceSide) -> float:
        """Return the bid or ask price."""
        return self.bid if side == PriceSide.BID else self.ask

    def previous_in(self, ticks: Sequence[Tick]) -> Optional[Tick]:
        """Resolve the previous tick against the sequence that owns it."""
        if self.previous_position is None or self.previous_position >= len(ticks):
            return None
        return ticks[self.previous_position]

    def next_in(self, ticks: Sequence[Tick]) -> Optional[Tick]:
        """Resolve the next tick against the sequence that owns it."""
        if self.next_position is None or self.next_position >= len(ticks):
            return None
        return ticks[self.next_position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tick):
            return NotImplemented
        return self.quotation == other.quotation and self.timestamp == other.timestamp

    def __hash__(self) -> int:
        return hash((self.quotation, self.timestamp))


def link_ticks(ticks: Sequence[Tick]) -> list[Tick]:
    """Return copies of ``ticks`` with previous/next positions filled in."""
    last = len(ticks) - 1
    return [
        tick.model_copy(
            update={
                "previous_position": index - 1 if index > 0 else None,
                "next_position": index + 1 if index < last else None,
            }
        )
        for index, tick in enumerate(ticks)
    ]
