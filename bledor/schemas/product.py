# bledor/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a product and for full (PUT) updates
class ProductCreate(ORMBase):
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True


# Schema for the availability toggle (stock-out signaling)
class ProductAvailabilityPatch(BaseModel):
    is_available: bool


class ProductOut(ORMBase):
    id: str
    name: str
    price: Decimal
    category: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool
    created_at: datetime


class FavoriteAdd(BaseModel):
    product_id: str


class FavoriteOut(ORMBase):
    id: str
    product: ProductOut
