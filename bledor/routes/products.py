# bledor/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from bledor.core import catalog
from bledor.core.access import Actor
from bledor.database import get_db
import bledor.schemas.product as product_schemas
from bledor.utils.audit import client_ip
from bledor.utils.tokenJWT import resolve_actor

router = APIRouter(prefix="/products", tags=["Products"])


# =========================
# STOREFRONT
# =========================
@router.get("/public", response_model=List[product_schemas.ProductOut])
def list_public_products(
    category: Optional[str] = Query(None, description="pain, viennoiserie, boisson, snack..."),
    db: Session = Depends(get_db),
):
    """Available products only, newest first. No authentication needed."""
    return catalog.list_public_products(db, category=category)


@router.get("/categories", response_model=List[str])
def get_product_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


# =========================
# MANAGEMENT
# =========================
@router.get("", response_model=List[product_schemas.ProductOut])
def list_products(
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search by name"),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return catalog.list_products(db, actor, category=category, q=q)


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return catalog.get_product(db, product_id, actor=actor)


@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return catalog.create_product(db, actor, payload, ip=client_ip(request))


@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: str,
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return catalog.update_product(db, actor, product_id, payload, ip=client_ip(request))


# Stock-out signaling: only the availability flag changes
@router.patch("/{product_id}/availability", response_model=product_schemas.ProductOut)
def update_product_availability(
    product_id: str,
    payload: product_schemas.ProductAvailabilityPatch,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return catalog.set_availability(db, actor, product_id, payload.is_available, ip=client_ip(request))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    catalog.delete_product(db, actor, product_id, ip=client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
