from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from foodcity.models.order import OrderStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)


class OrderStatusHistoryResponse(BaseModel):
    old_status: Optional[str] = None
    new_status: str
    notes: Optional[str] = None
    changed_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderTrackingResponse(BaseModel):
    order_id: int
    order_number: str
    current_status: OrderStatus
    status_history: List[OrderStatusHistoryResponse] = []
