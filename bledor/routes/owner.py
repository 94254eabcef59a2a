# bledor/routes/owner.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from bledor.core import accounts
from bledor.core.access import Actor
from bledor.database import get_db
from bledor.schemas.user import ManagerCreate, ManagerOut, ManagerUpdate, MessageResponse
from bledor.utils.audit import client_ip
from bledor.utils.tokenJWT import resolve_actor

router = APIRouter(prefix="/owner", tags=["Owner"])


# List manager accounts, newest first (owner only)
@router.get("/managers", response_model=List[ManagerOut])
def get_managers(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return accounts.list_managers(db, actor)


# Create a manager account (owner only)
@router.post("/managers", response_model=ManagerOut, status_code=status.HTTP_201_CREATED)
def create_manager(
    payload: ManagerCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return accounts.create_manager(db, actor, payload, ip=client_ip(request))


# Edit a manager account; omitted fields are kept (owner only)
@router.put("/managers/{manager_id}", response_model=ManagerOut)
def update_manager(
    manager_id: str,
    payload: ManagerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return accounts.update_manager(db, actor, manager_id, payload, ip=client_ip(request))


# Delete a manager account (owner only)
@router.delete("/managers/{manager_id}", response_model=MessageResponse)
def delete_manager(
    manager_id: str,
    request: Request,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    accounts.delete_manager(db, actor, manager_id, ip=client_ip(request))
    return {"success": True, "message": "Manager deleted."}
