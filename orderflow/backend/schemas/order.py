"""
Order Schemas.
"""

from datetime import datetime

from pydantic import Field, computed_field

from orderflow.backend.schemas.base import CamelModel


class OrderItem(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)

    @computed_field
    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


class OrderCreate(CamelModel):
    """Schema for placing an order. New orders start in `created`."""

    customer_id: str = Field(..., min_length=1)
    shop_id: str = Field(..., min_length=1)
    courier_id: str | None = None
    items: list[OrderItem] = Field(..., min_length=1)


class OrderStatusUpdate(CamelModel):
    status: str = Field(..., min_length=1, max_length=50, examples=["confirmed"])
    notes: str | None = Field(default=None, max_length=1000, description="Reason or comment")


class StatusHistoryEntry(CamelModel):
    status: str
    timestamp: datetime
    updated_by: str | None = None
    notes: str | None = None


class OrderResponse(CamelModel):
    id: str = Field(alias="_id")
    order_number: str
    customer_id: str
    shop_id: str
    courier_id: str | None = None
    items: list[dict]
    total: float
    status: str
    rejection_reason: str | None = None
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
