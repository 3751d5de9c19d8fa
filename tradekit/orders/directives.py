"""Order directives: caller descriptions of an intended order action."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from tradekit.core.enums import OrderDirection, OrderPurpose


class PositionProtection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None


class OpenPositionDirectives(BaseModel):
    """Open a new position, at market or through a limit/stop order."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    purpose: Literal[OrderPurpose.OPEN] = OrderPurpose.OPEN
    symbol: str
    direction: OrderDirection
    volume: float = Field(gt=0)
    limit: Optional[float] = None
    stop: Optional[float] = None
    protection: Optional[PositionProtection] = None

    @model_validator(mode="after")
    def _single_execution_price(self) -> OpenPositionDirectives:
        if self.limit is not None and self.stop is not None:
            raise ValueError("limit and stop are mutually exclusive")
        return self

    @property
    def is_market(self) -> bool:
        return self.limit is None and self.stop is None


class IncreasePositionDirectives(BaseModel):
    """Add volume to an existing position."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    purpose: Literal[OrderPurpose.OPEN] = OrderPurpose.OPEN
    position_id: str
    volume: float = Field(gt=0)


class ClosePositionDirectives(BaseModel):
    """Close a position, fully when volume is omitted."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    purpose: Literal[OrderPurpose.CLOSE] = OrderPurpose.CLOSE
    position_id: str
    volume: Optional[float] = Field(default=None, gt=0)


OrderDirectives = Union[
    OpenPositionDirectives,
    IncreasePositionDirectives,
    ClosePositionDirectives,
]

_directives_adapter: TypeAdapter[OrderDirectives] = TypeAdapter(OrderDirectives)


def parse_order_directives(data: Any) -> OrderDirectives:
    """Validate raw directives (e.g. decoded JSON) into the matching variant."""
    return _directives_adapter.validate_python(data)
