# bledor/core/orders.py
"""
Order lifecycle: cart to order, ticket numbering and status changes.

Every operation takes the acting identity explicitly and checks its role
before touching the database. Prices always come from the catalog at call
time; the caller never supplies them.
"""
import logging
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bledor.config import settings
from bledor.core.access import Actor, require_role, require_staff
from bledor.core.catalog import get_products_by_ids
from bledor.core.errors import (
    DuplicateTicket,
    EmptyCart,
    Forbidden,
    InvalidStatus,
    MissingCustomerName,
    OrderNotFound,
    ProductNotFound,
    StorageError,
    TicketGenerationFailed,
)
from bledor.core.storage import commit
from bledor.core.tickets import generate_ticket_number
from bledor.database import new_id
from bledor.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from bledor.models.users import Role, User
from bledor.schemas.order import CartLine, ClientOrderCreate, OrderCreate
from bledor.utils.audit import stage_log

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    # str() first so floats keep their decimal representation
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_status(value) -> OrderStatus:
    """Accept exactly one of the five canonical status names."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid order status: {value!r}.")


def day_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = now or datetime.now()
    return datetime.combine(now.date(), time.min), datetime.combine(now.date(), time.max)


# -----------------------------
# Pricing
# -----------------------------

def price_lines(db: Session, lines: Sequence[CartLine]) -> List[tuple]:
    """Resolve every cart line against the catalog.

    Returns ``(product_id, quantity, unit_price)`` triples in cart order. One
    batch read fetches the distinct ids; if any id is unknown the whole cart
    is rejected with ``ProductNotFound``.
    """
    requested = list(dict.fromkeys(line.product_id for line in lines))
    products = {p.id: p for p in get_products_by_ids(db, requested)}

    missing = [pid for pid in requested if pid not in products]
    if missing:
        raise ProductNotFound(missing)

    return [(line.product_id, line.quantity, to_money(products[line.product_id].price)) for line in lines]


def order_total(priced_lines) -> Decimal:
    total = sum((quantity * unit_price for _, quantity, unit_price in priced_lines), Decimal("0"))
    return to_money(total)


# -----------------------------
# Persistence
# -----------------------------

def _is_ticket_collision(exc: IntegrityError) -> bool:
    return "ticket_number" in str(exc.orig)


def _insert(db: Session, order: Order) -> None:
    """Commit the staged order, its items and its audit entry together."""
    db.add(order)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_ticket_collision(exc):
            raise DuplicateTicket() from exc
        logger.exception("Order insert failed: %s", exc)
        raise StorageError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Order insert failed: %s", exc)
        raise StorageError() from exc
    except Exception:
        # Driver-level errors such as value overflow
        db.rollback()
        raise


def _persist_order(db: Session, actor: Actor, priced_lines, channel: str, ip: Optional[str] = None,
                   **fields) -> Order:
    total = order_total(priced_lines)

    for attempt in range(1, settings.TICKET_MAX_ATTEMPTS + 1):
        order = Order(
            id=new_id(),
            status=OrderStatus.PENDING,
            total=total,
            ticket_number=generate_ticket_number(),
            items=[
                OrderItem(product_id=product_id, quantity=quantity, unit_price=unit_price, position=position)
                for position, (product_id, quantity, unit_price) in enumerate(priced_lines)
            ],
            **fields,
        )
        # Rolled back with the order when the insert fails
        stage_log(db, user_id=actor.user_id, action="ORDER_CREATE", resource="orders", ip=ip,
                  meta={"order_id": order.id, "ticket": order.ticket_number, "total": str(total),
                        "channel": channel})
        try:
            _insert(db, order)
        except DuplicateTicket:
            logger.warning("Ticket %s already taken (attempt %d/%d)",
                           order.ticket_number, attempt, settings.TICKET_MAX_ATTEMPTS)
            continue
        db.refresh(order)
        return order

    raise TicketGenerationFailed()


# -----------------------------
# Creation
# -----------------------------

def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def create_order(db: Session, actor: Optional[Actor], payload: OrderCreate, ip: Optional[str] = None) -> Order:
    """Point-of-sale order rung up by a manager or the owner."""
    actor = require_staff(actor)
    if not payload.items:
        raise EmptyCart()

    priced = price_lines(db, payload.items)
    order = _persist_order(
        db, actor, priced, "pos", ip=ip,
        payment_method=payload.payment_method,
        customer_name=_clean(payload.customer_name),
        customer_note=_clean(payload.customer_note),
        manager_id=actor.user_id,
    )
    logger.info("Order %s created at the till by %s, total %s", order.ticket_number, actor.user_id, order.total)
    return order


def create_client_order(db: Session, actor: Optional[Actor], payload: ClientOrderCreate,
                        ip: Optional[str] = None) -> Order:
    """Self-service pickup order placed by a client for themselves.

    The customer name falls back to the client's profile name and must not
    be blank. Payment happens at pickup, so the method is always CASH.
    """
    actor = require_role(actor, Role.CLIENT)
    if not payload.items:
        raise EmptyCart()

    customer_name = _clean(payload.customer_name)
    if customer_name is None:
        user = db.get(User, actor.user_id)
        customer_name = _clean(user.name) if user else None
    if customer_name is None:
        raise MissingCustomerName()

    priced = price_lines(db, payload.items)
    order = _persist_order(
        db, actor, priced, "web", ip=ip,
        payment_method=PaymentMethod.CASH,
        customer_name=customer_name,
        customer_note=_clean(payload.customer_note),
        customer_id=actor.user_id,
    )
    logger.info("Order %s placed online by %s, total %s", order.ticket_number, actor.user_id, order.total)
    return order


# -----------------------------
# Status
# -----------------------------

def set_order_status(db: Session, actor: Optional[Actor], order_id: str, new_status,
                     ip: Optional[str] = None) -> Order:
    """Overwrite the status of an order.

    Only membership in ``OrderStatus`` is checked: staff may move an order
    to any state, terminal ones included, to correct mistakes. The previous
    value is kept in the audit log, committed together with the change.
    """
    actor = require_staff(actor)
    status = parse_status(new_status)

    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFound()

    old_status = order.status
    order.status = status
    stage_log(db, user_id=actor.user_id, action="ORDER_STATUS_CHANGE", resource="orders", ip=ip,
              meta={"order_id": order.id, "old": old_status.value, "new": status.value})
    commit(db)
    db.refresh(order)
    return order


# -----------------------------
# Reads
# -----------------------------

def _with_items(query):
    return query.options(selectinload(Order.items).selectinload(OrderItem.product))


def list_orders(db: Session, actor: Optional[Actor], date_from: Optional[datetime] = None,
                date_to: Optional[datetime] = None, status=None) -> List[Order]:
    """Orders for the manager console, newest first. Without any date bound
    the window is the current day."""
    require_staff(actor)
    if date_from is None and date_to is None:
        date_from, date_to = day_range()

    query = _with_items(db.query(Order))
    if date_from is not None:
        query = query.filter(Order.created_at >= date_from)
    if date_to is not None:
        query = query.filter(Order.created_at <= date_to)
    if status is not None:
        query = query.filter(Order.status == parse_status(status))
    return query.order_by(Order.created_at.desc()).all()


def list_client_orders(db: Session, actor: Optional[Actor]) -> List[Order]:
    actor = require_role(actor, Role.CLIENT)
    query = _with_items(db.query(Order)).filter(Order.customer_id == actor.user_id)
    return query.order_by(Order.created_at.desc()).all()


def get_order(db: Session, actor: Optional[Actor], order_id: str) -> Order:
    """Staff see any order. A client sees only their own and gets the same
    ``Forbidden`` for every other id, whether it exists or not."""
    actor = require_role(actor, Role.CLIENT, Role.MANAGER, Role.OWNER)
    order = _with_items(db.query(Order)).filter(Order.id == order_id).first()
    if actor.is_staff:
        if order is None:
            raise OrderNotFound()
        return order
    if order is None or order.customer_id != actor.user_id:
        raise Forbidden()
    return order
