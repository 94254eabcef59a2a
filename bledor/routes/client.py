# bledor/routes/client.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bledor.core import accounts, favorites
from bledor.core.access import Actor
from bledor.core.orders import list_client_orders
from bledor.database import get_db
from bledor.routes.orders import order_to_out
from bledor.schemas.order import OrderOut
from bledor.schemas.product import FavoriteAdd, FavoriteOut
from bledor.schemas.user import MessageResponse, ProfileUpdate, UserResponse
from bledor.utils.tokenJWT import resolve_actor

router = APIRouter(tags=["Client"])


# Update own profile (clients only)
@router.put("/client/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return accounts.update_client_profile(db, actor, payload)


# Own pickup orders, newest first
@router.get("/client/orders", response_model=List[OrderOut])
def my_orders(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return [order_to_out(o) for o in list_client_orders(db, actor)]


# =========================
# FAVORITES
# =========================
@router.get("/favorites", response_model=List[FavoriteOut])
def get_favorites(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return favorites.list_favorites(db, actor)


@router.post("/favorites", response_model=MessageResponse)
def add_favorite(
    payload: FavoriteAdd,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    favorites.add_favorite(db, actor, payload.product_id)
    return {"success": True, "message": "Added to favorites."}


@router.delete("/favorites/{product_id}", response_model=MessageResponse)
def remove_favorite(
    product_id: str,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    favorites.remove_favorite(db, actor, product_id)
    return {"success": True, "message": "Removed from favorites."}
