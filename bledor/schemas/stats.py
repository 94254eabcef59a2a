from pydantic import BaseModel
from decimal import Decimal
from datetime import datetime


# Today's orders bucketed by status (manager dashboard)
class StatusCounts(BaseModel):
    total_orders: int
    pending: int
    preparation: int
    ready: int
    delivered: int
    canceled: int
    total_amount: Decimal


# Realized sales over a period (owner dashboard)
class PeriodSummary(BaseModel):
    date_from: datetime
    date_to: datetime
    total_sales: Decimal
    total_orders: int
    avg_ticket: Decimal
    canceled_count: int
