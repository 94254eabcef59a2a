# bledor/core/favorites.py
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from bledor.core.access import Actor, require_role
from bledor.core.errors import ProductNotFound
from bledor.core.storage import commit
from bledor.models.favorite import Favorite
from bledor.models.product import Product
from bledor.models.users import Role

ANY_ROLE = (Role.CLIENT, Role.MANAGER, Role.OWNER)


def list_favorites(db: Session, actor: Optional[Actor]) -> List[Favorite]:
    actor = require_role(actor, *ANY_ROLE)
    return (db.query(Favorite)
            .options(joinedload(Favorite.product))
            .filter(Favorite.user_id == actor.user_id)
            .order_by(Favorite.created_at.desc())
            .all())


def add_favorite(db: Session, actor: Optional[Actor], product_id: str) -> None:
    """Mark a product as favorite. Adding it twice is a no-op."""
    actor = require_role(actor, *ANY_ROLE)
    if db.get(Product, product_id) is None:
        raise ProductNotFound([product_id])

    exists = db.query(Favorite).filter(Favorite.user_id == actor.user_id,
                                       Favorite.product_id == product_id).first()
    if exists:
        return
    db.add(Favorite(user_id=actor.user_id, product_id=product_id))
    try:
        db.commit()
    except IntegrityError:
        # Concurrent add of the same pair
        db.rollback()


def remove_favorite(db: Session, actor: Optional[Actor], product_id: str) -> None:
    actor = require_role(actor, *ANY_ROLE)
    db.query(Favorite).filter(Favorite.user_id == actor.user_id,
                              Favorite.product_id == product_id).delete(synchronize_session=False)
    commit(db)
