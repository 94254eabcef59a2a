# bledor/seed.py
"""Create the demo accounts and a starter catalog.

Run with ``python -m bledor.seed``. Existing rows (matched by email or
product name) are left untouched, so the script can be re-run safely.
"""
import logging
from decimal import Decimal

from bledor.database import SessionLocal, init_db
from bledor.models.product import Product
from bledor.models.users import Role, User
from bledor.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

USERS = [
    ("owner@bledor.fr", "admin123", "Propriétaire", Role.OWNER),
    ("manager@bledor.fr", "manager123", "Gérant", Role.MANAGER),
    ("client@bledor.fr", "client123", "Client", Role.CLIENT),
]

PRODUCTS = [
    ("Baguette tradition", Decimal("1.20"), "pain", "Farine Label Rouge, levain naturel."),
    ("Pain de campagne", Decimal("3.80"), "pain", None),
    ("Croissant au beurre", Decimal("1.10"), "viennoiserie", "Beurre AOP Charentes-Poitou."),
    ("Pain au chocolat", Decimal("1.30"), "viennoiserie", None),
    ("Café", Decimal("1.50"), "boisson", None),
    ("Jus d'orange pressé", Decimal("3.00"), "boisson", None),
    ("Sandwich jambon-beurre", Decimal("4.50"), "snack", None),
]


def seed(session) -> None:
    for email, password, name, role in USERS:
        if session.query(User).filter(User.email == email).first():
            continue
        session.add(User(email=email, password_hash=get_password_hash(password), name=name, role=role))
        logger.info("Created %s account %s", role.value, email)

    for name, price, category, description in PRODUCTS:
        if session.query(Product).filter(Product.name == name).first():
            continue
        session.add(Product(name=name, price=price, category=category, description=description))
        logger.info("Created product %s", name)

    session.commit()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()


if __name__ == "__main__":
    main()
