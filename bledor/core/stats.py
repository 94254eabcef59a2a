# bledor/core/stats.py
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from bledor.core.access import Actor, require_role, require_staff
from bledor.core.orders import day_range, to_money
from bledor.models.order import Order, OrderStatus, REALIZED_STATUSES
from bledor.models.users import Role


def realized_revenue(orders: Iterable[Order]) -> Decimal:
    """Sum of totals over READY and DELIVERED orders. Pending, in-preparation
    and canceled orders are not sales yet (or anymore)."""
    return to_money(sum((o.total for o in orders if o.status in REALIZED_STATUSES), Decimal("0")))


def status_counts(orders: Iterable[Order]) -> dict:
    counts = {status: 0 for status in OrderStatus}
    total_orders = 0
    total_amount = Decimal("0")
    for order in orders:
        counts[order.status] += 1
        total_orders += 1
        total_amount += order.total
    return {
        "total_orders": total_orders,
        "pending": counts[OrderStatus.PENDING],
        "preparation": counts[OrderStatus.PREPARATION],
        "ready": counts[OrderStatus.READY],
        "delivered": counts[OrderStatus.DELIVERED],
        "canceled": counts[OrderStatus.CANCELED],
        "total_amount": to_money(total_amount),
    }


def _orders_between(db: Session, start: datetime, end: datetime):
    return db.query(Order).filter(Order.created_at >= start, Order.created_at <= end).all()


def todays_status_counts(db: Session, actor: Optional[Actor], now: Optional[datetime] = None) -> dict:
    require_staff(actor)
    start, end = day_range(now)
    return status_counts(_orders_between(db, start, end))


def period_summary(db: Session, actor: Optional[Actor], date_from: Optional[datetime] = None,
                   date_to: Optional[datetime] = None) -> dict:
    require_role(actor, Role.OWNER)
    if date_from is None or date_to is None:
        today_start, today_end = day_range()
        date_from = date_from or today_start
        date_to = date_to or today_end

    orders = _orders_between(db, date_from, date_to)
    realized = [o for o in orders if o.status in REALIZED_STATUSES]
    total_sales = realized_revenue(realized)
    avg_ticket = to_money(total_sales / len(realized)) if realized else to_money(0)

    return {
        "date_from": date_from,
        "date_to": date_to,
        "total_sales": total_sales,
        "total_orders": len(realized),
        "avg_ticket": avg_ticket,
        "canceled_count": sum(1 for o in orders if o.status == OrderStatus.CANCELED),
    }
