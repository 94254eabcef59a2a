from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from bledor.models.order import OrderStatus, PaymentMethod


# Largest quantity accepted on a single cart line
MAX_LINE_QUANTITY = 999


# One requested cart line. Any price sent by the caller is ignored:
# unit prices always come from the catalog.
class CartLine(BaseModel):
    product_id: str
    quantity: int = Field(default=1, gt=0, le=MAX_LINE_QUANTITY)

    # A missing or null quantity means one unit; explicit bad values are rejected
    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value):
        return 1 if value is None else value


# Input schema for the point-of-sale variant (manager/owner at the till)
class OrderCreate(BaseModel):
    items: List[CartLine] = []
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_name: Optional[str] = None
    customer_note: Optional[str] = None


# Input schema for the self-service variant (client storefront cart)
class ClientOrderCreate(BaseModel):
    items: List[CartLine] = []
    customer_name: Optional[str] = None
    customer_note: Optional[str] = None


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


# Output schema representing the full order details
class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ticket_number: str
    status: OrderStatus
    payment_method: PaymentMethod
    total: Decimal
    customer_name: Optional[str] = None
    customer_note: Optional[str] = None
    manager_id: Optional[str] = None
    customer_id: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut]


# Schema for updating order status. Membership in OrderStatus is checked by
# the order engine so unknown values surface as InvalidStatus.
class OrderStatusPatch(BaseModel):
    status: str
