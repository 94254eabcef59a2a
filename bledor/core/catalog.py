# bledor/core/catalog.py
"""
Catalog collaborator: the authoritative source of product prices and
availability. Reads are open; writes are reserved to staff.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from bledor.core.access import Actor, require_staff
from bledor.core.errors import ProductNotFound
from bledor.core.storage import commit
from bledor.models.favorite import Favorite
from bledor.models.product import Product
from bledor.schemas.product import ProductCreate
from bledor.utils.audit import write_log

logger = logging.getLogger(__name__)


def get_products_by_ids(db: Session, ids: Iterable[str]) -> List[Product]:
    """Return the products that exist among ``ids``; unknown ids are simply absent."""
    ids = set(ids)
    if not ids:
        return []
    return db.query(Product).filter(Product.id.in_(ids)).all()


def list_public_products(db: Session, category: Optional[str] = None) -> List[Product]:
    query = db.query(Product).filter(Product.is_available.is_(True))
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.created_at.desc()).all()


def list_products(db: Session, actor: Optional[Actor], category: Optional[str] = None,
                  q: Optional[str] = None) -> List[Product]:
    require_staff(actor)
    query = db.query(Product)
    if category:
        query = query.filter(Product.category == category)
    if q:
        query = query.filter(Product.name.ilike(f"%{q}%"))
    return query.order_by(Product.created_at.desc()).all()


def list_categories(db: Session) -> List[str]:
    values = db.query(Product.category).distinct().filter(Product.category != None, Product.category != "").all()  # noqa: E711
    return sorted(v[0] for v in values)


def get_product(db: Session, product_id: str, actor: Optional[Actor] = None) -> Product:
    """Fetch one product. Unavailable products are only visible to staff."""
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFound([product_id])
    if not product.is_available and not (actor and actor.is_staff):
        raise ProductNotFound([product_id])
    return product


def _get_for_update(db: Session, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFound([product_id])
    return product


def create_product(db: Session, actor: Optional[Actor], payload: ProductCreate, ip: Optional[str] = None) -> Product:
    require_staff(actor)
    product = Product(**payload.model_dump())
    db.add(product)
    commit(db)
    db.refresh(product)
    write_log(db, user_id=actor.user_id, action="PRODUCT_CREATE", resource="products", ip=ip,
              meta={"product_id": product.id, "name": product.name, "price": str(product.price)})
    return product


def update_product(db: Session, actor: Optional[Actor], product_id: str, payload: ProductCreate,
                   ip: Optional[str] = None) -> Product:
    """Full replacement of the editable fields (PUT semantics)."""
    require_staff(actor)
    product = _get_for_update(db, product_id)
    for field, value in payload.model_dump().items():
        setattr(product, field, value)
    commit(db)
    db.refresh(product)
    write_log(db, user_id=actor.user_id, action="PRODUCT_UPDATE", resource="products", ip=ip,
              meta={"product_id": product.id, "price": str(product.price)})
    return product


def set_availability(db: Session, actor: Optional[Actor], product_id: str, is_available: bool,
                     ip: Optional[str] = None) -> Product:
    require_staff(actor)
    product = _get_for_update(db, product_id)
    product.is_available = is_available
    commit(db)
    db.refresh(product)
    write_log(db, user_id=actor.user_id, action="PRODUCT_AVAILABILITY", resource="products", ip=ip,
              meta={"product_id": product.id, "is_available": is_available})
    return product


def delete_product(db: Session, actor: Optional[Actor], product_id: str, ip: Optional[str] = None) -> None:
    """Remove a product and its favorites. Order items keep their snapshot."""
    require_staff(actor)
    product = _get_for_update(db, product_id)
    db.query(Favorite).filter(Favorite.product_id == product_id).delete(synchronize_session=False)
    db.delete(product)
    commit(db)
    logger.info("Product %s deleted by %s", product_id, actor.user_id)
    write_log(db, user_id=actor.user_id, action="PRODUCT_DELETE", resource="products", ip=ip,
              meta={"product_id": product_id})
