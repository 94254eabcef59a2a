from bledor.models.users import User, Role
from bledor.models.product import Product
from bledor.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from bledor.models.favorite import Favorite
from bledor.models.password_reset import PasswordResetToken
from bledor.models.log import Log

__all__ = [
    "User", "Role", "Product", "Order", "OrderItem", "OrderStatus", "PaymentMethod",
    "Favorite", "PasswordResetToken", "Log",
]
