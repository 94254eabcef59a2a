# bledor/routes/orders.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from bledor.core import orders as engine
from bledor.core.access import Actor
from bledor.database import get_db
from bledor.models.order import Order
from bledor.schemas.order import (
    ClientOrderCreate, OrderCreate, OrderItemOut, OrderOut, OrderStatusPatch,
)
from bledor.utils.audit import client_ip
from bledor.utils.tokenJWT import resolve_actor

router = APIRouter(prefix="/orders", tags=["Orders"])


# Map Order model to OrderOut schema
def order_to_out(order: Order) -> OrderOut:
    items: List[OrderItemOut] = []
    for it in order.items:
        product_name = it.product.name if it.product else "Deleted product"
        items.append(OrderItemOut(
            product_id=it.product_id,
            product_name=product_name,
            quantity=it.quantity,
            unit_price=engine.to_money(it.unit_price),
            line_total=engine.to_money(it.quantity * it.unit_price),
        ))
    return OrderOut(
        id=order.id,
        ticket_number=order.ticket_number,
        status=order.status,
        payment_method=order.payment_method,
        total=engine.to_money(order.total),
        customer_name=order.customer_name,
        customer_note=order.customer_note,
        manager_id=order.manager_id,
        customer_id=order.customer_id,
        created_at=order.created_at,
        items=items,
    )


# Point of sale: order rung up at the till by a manager or the owner
@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    order = engine.create_order(db, actor, payload, ip=client_ip(request))
    return order_to_out(order)


# Storefront: pickup order placed by a client from their cart
@router.post("/from-cart", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order_from_cart(
    payload: ClientOrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    order = engine.create_client_order(db, actor, payload, ip=client_ip(request))
    return order_to_out(order)


# Orders for the manager console, newest first (today when no date is given)
@router.get("", response_model=List[OrderOut])
def list_orders(
    date_from: Optional[datetime] = Query(None, description="Created at or after"),
    date_to: Optional[datetime] = Query(None, description="Created at or before"),
    status: Optional[str] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    rows = engine.list_orders(db, actor, date_from=date_from, date_to=date_to, status=status)
    return [order_to_out(o) for o in rows]


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderOut)
def get_order_detail(
    order_id: str,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return order_to_out(engine.get_order(db, actor, order_id))


# Change order status (manager/owner)
@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    order = engine.set_order_status(db, actor, order_id, payload.status, ip=client_ip(request))
    return order_to_out(engine.get_order(db, actor, order.id))
