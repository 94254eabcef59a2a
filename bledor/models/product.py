# bledor/models/product.py
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Numeric, CheckConstraint
from bledor.database import Base, new_id

# Product
# A sellable catalog entry. Category is free text, conventionally one of
# pain / viennoiserie / boisson / snack. Only available products are shown
# on the public storefront.
class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    category = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
