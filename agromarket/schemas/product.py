from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from agromarket.core.database import MAX_INTEGER
from agromarket.models.product import Category
from .user import UserResponse


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: Category
    quantity: int = Field(..., ge=0, le=MAX_INTEGER)


class ProductCreate(ProductBase):
    image: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    category: Optional[Category] = None
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)


class ProductResponse(ProductBase):
    id: int
    image: str
    seller_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductWithSeller(ProductResponse):
    seller: UserResponse


class ProductList(BaseModel):
    products: List[ProductWithSeller]
    total: int
