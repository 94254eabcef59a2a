# bledor/models/order.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from bledor.database import Base, new_id


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PREPARATION = "PREPARATION"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    MOBILE = "MOBILE"
    OTHER = "OTHER"


# Statuses that count as realized sales
REALIZED_STATUSES = (OrderStatus.READY, OrderStatus.DELIVERED)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)
    status = Column(Enum(OrderStatus, native_enum=False, length=16), nullable=False, default=OrderStatus.PENDING, index=True)
    payment_method = Column(Enum(PaymentMethod, native_enum=False, length=16), nullable=False, default=PaymentMethod.CASH)
    total = Column(Numeric(10, 2), nullable=False)
    ticket_number = Column(String(40), unique=True, nullable=False, index=True)
    customer_name = Column(String, nullable=True)
    customer_note = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Staff member who rang the order up (point of sale), null for self-service
    manager_id = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    # Client who placed a self-service order
    customer_id = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.position")
    manager = relationship("User", foreign_keys=[manager_id])


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(32), primary_key=True, default=new_id)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Weak reference: resolved once at order time, never re-read
    product_id = Column(String(32), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship(
        "Product",
        primaryjoin="foreign(OrderItem.product_id) == Product.id",
        viewonly=True,
    )
