from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from agromarket.core.database import MAX_INTEGER
from agromarket.models.order import OrderStatus
from .product import ProductResponse
from .user import UserResponse


class OrderItemCreate(BaseModel):
    product_id: int = Field(..., ge=1, le=MAX_INTEGER)
    quantity: int = Field(..., gt=0, le=MAX_INTEGER)


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: float
    product: Optional[ProductResponse] = None

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: int
    buyer_id: int
    total: float
    status: OrderStatus
    created_at: datetime
    items: List[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderWithDetails(OrderResponse):
    buyer: UserResponse


class OrderList(BaseModel):
    orders: List[OrderWithDetails]
    total: int


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: float
    active_listings: int
    recent_transactions: List[OrderWithDetails]
