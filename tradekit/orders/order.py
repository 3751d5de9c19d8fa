"""Broker order model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tradekit.core.enums import OrderDirection, OrderPurpose, OrderStatus


class Order(BaseModel):
    """Order model - mutable during lifecycle.

    Fields are only changed by the account implementation that owns the
    order, as a consequence of account operations.
    """
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    ticket: int
    symbol: str
    direction: OrderDirection
    purpose: OrderPurpose = OrderPurpose.OPEN
    status: OrderStatus = OrderStatus.PENDING
    volume: float = Field(gt=0)
    position_id: Optional[str] = None
    requested_open_price: Optional[float] = None  # limit or stop price
    open_price: Optional[float] = None
    close_price: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    creation_time: datetime = Field(default_factory=datetime.utcnow)
    open_time: Optional[datetime] = None
    close_time: Optional[datetime] = None
    cancel_time: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        """Check if order is in a terminal state."""
        return self.status in {OrderStatus.CLOSED, OrderStatus.CANCELED}

    @property
    def is_buy(self) -> bool:
        return self.direction == OrderDirection.BUY

    @property
    def is_sell(self) -> bool:
        return self.direction == OrderDirection.SELL
