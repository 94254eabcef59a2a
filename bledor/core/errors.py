# bledor/core/errors.py
"""
Error taxonomy of the ordering core.

Every error carries a stable, user-readable message and the HTTP status the
request layer answers with. Route handlers never build these responses
themselves: ``main.py`` registers a single handler for ``BakeryError``.
"""


class BakeryError(Exception):
    """Base class for every error raised by the core."""
    status_code = 400
    message = "Invalid request."

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


# ===============================================
# ACCESS
# ===============================================

class Unauthenticated(BakeryError):
    status_code = 401
    message = "Authentication required."


class Forbidden(BakeryError):
    status_code = 403
    message = "You are not allowed to perform this action."


class InvalidCredentials(BakeryError):
    status_code = 401
    message = "Invalid email or password."


# ===============================================
# ORDER LIFECYCLE
# ===============================================

class EmptyCart(BakeryError):
    message = "An order must contain at least one product."


class MissingCustomerName(BakeryError):
    message = "Customer name is required."


class ProductNotFound(BakeryError):
    status_code = 404
    message = "Product not found."

    def __init__(self, product_ids=None, message=None):
        self.product_ids = list(product_ids or [])
        if message is None and self.product_ids:
            message = "Product not found: " + ", ".join(self.product_ids)
        super().__init__(message)


class InvalidStatus(BakeryError):
    message = "Invalid order status."


class OrderNotFound(BakeryError):
    status_code = 404
    message = "Order not found."


class DuplicateTicket(BakeryError):
    status_code = 409
    message = "Ticket number already in use."


class TicketGenerationFailed(BakeryError):
    status_code = 500
    message = "Could not allocate a ticket number for this order."


class StorageError(BakeryError):
    status_code = 500
    message = "A storage error occurred, please try again."


# ===============================================
# ACCOUNTS
# ===============================================

class UserNotFound(BakeryError):
    status_code = 404
    message = "User not found."


class EmailAlreadyRegistered(BakeryError):
    message = "An account already exists with this email."


class InvalidEmail(BakeryError):
    message = "Invalid email."


class WeakPassword(BakeryError):
    def __init__(self, min_length: int):
        super().__init__(f"Password must be at least {min_length} characters long.")


class InvalidResetToken(BakeryError):
    message = "Invalid or expired reset link."


class ExpiredResetToken(BakeryError):
    message = "Reset link expired."
