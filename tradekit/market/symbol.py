"""Tradable symbol description."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tradekit.core.enums import SymbolType


class Symbol(BaseModel):
    """A symbol as listed by a broker account."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    symbol: str
    type: SymbolType
    description: str = ""
    base_asset: Optional[str] = None
    quote_asset: Optional[str] = None
    lot_units: float = Field(default=1.0, gt=0)
    min_lots: float = Field(default=0.01, gt=0)
    max_lots: float = Field(default=100.0, gt=0)
    leverage: float = Field(default=1.0, gt=0)

    def __str__(self) -> str:
        return self.symbol
