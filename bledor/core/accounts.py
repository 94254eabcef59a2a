# bledor/core/accounts.py
"""
User directory: registration, login, client profile, password reset and
owner-managed manager accounts.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from bledor.config import settings
from bledor.core.access import Actor, require_role
from bledor.core.errors import (
    EmailAlreadyRegistered,
    ExpiredResetToken,
    InvalidCredentials,
    InvalidEmail,
    InvalidResetToken,
    UserNotFound,
    WeakPassword,
)
from bledor.core.storage import commit
from bledor.models.favorite import Favorite
from bledor.models.order import Order
from bledor.models.password_reset import PasswordResetToken
from bledor.models.users import Role, User
from bledor.schemas.user import ManagerCreate, ManagerUpdate, ProfileUpdate, UserCreate
from bledor.utils.audit import write_log
from bledor.utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)

RESET_NEUTRAL_MESSAGE = "If an account exists with this email, a reset link has been generated."


def normalize_email(email: Optional[str]) -> str:
    normalized = (email or "").strip().lower()
    if not normalized:
        raise InvalidEmail()
    return normalized


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _check_password(password: Optional[str]) -> None:
    if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
        raise WeakPassword(settings.PASSWORD_MIN_LENGTH)


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def _create_user(db: Session, *, email: str, password: str, role: Role,
                 name: Optional[str] = None, phone: Optional[str] = None) -> User:
    normalized_email = normalize_email(email)
    if find_by_email(db, normalized_email):
        raise EmailAlreadyRegistered()
    _check_password(password)

    user = User(
        email=normalized_email,
        password_hash=get_password_hash(password),
        role=role,
        name=_optional(name),
        phone=_optional(phone),
    )
    db.add(user)
    commit(db)
    db.refresh(user)
    return user


# -----------------------------
# Registration and login
# -----------------------------

def register_client(db: Session, payload: UserCreate, ip: Optional[str] = None) -> User:
    """Self-service sign-up. Always creates a CLIENT account."""
    try:
        user = _create_user(db, email=payload.email, password=payload.password, role=Role.CLIENT,
                            name=payload.name, phone=payload.phone)
    except EmailAlreadyRegistered:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL", ip=ip,
                  meta={"email": payload.email, "reason": "Email exists"})
        raise
    write_log(db, user_id=user.id, action="REGISTER", resource="auth", ip=ip, meta={"email": user.email})
    return user


def authenticate(db: Session, email: str, password: str, ip: Optional[str] = None) -> User:
    user = find_by_email(db, email) if (email or "").strip() else None
    if not user or not verify_password(password, user.password_hash):
        write_log(db, user_id=(user.id if user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"email": email})
        raise InvalidCredentials()
    write_log(db, user_id=user.id, action="LOGIN", resource="auth", ip=ip, meta={"email": user.email})
    return user


# -----------------------------
# Client profile
# -----------------------------

def update_client_profile(db: Session, actor: Optional[Actor], payload: ProfileUpdate) -> User:
    actor = require_role(actor, Role.CLIENT)
    user = db.get(User, actor.user_id)
    if user is None:
        raise UserNotFound()
    user.name = _optional(payload.name)
    user.phone = _optional(payload.phone)
    user.marketing_opt_in = bool(payload.marketing_opt_in)
    commit(db)
    db.refresh(user)
    return user


# -----------------------------
# Password reset
# -----------------------------

def request_password_reset(db: Session, email: str, ip: Optional[str] = None) -> Optional[PasswordResetToken]:
    """Issue a fresh reset token, replacing any previous one for that user.

    Returns None for unknown emails; callers answer the same way in both
    cases so the endpoint does not reveal which emails have accounts.
    """
    user = find_by_email(db, email) if (email or "").strip() else None
    if user is None:
        return None

    # Delete and insert in the same transaction
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user.id).delete(synchronize_session=False)
    reset_token = PasswordResetToken(
        token=secrets.token_hex(32),
        user_id=user.id,
        expires_at=datetime.now() + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
    )
    db.add(reset_token)
    commit(db)
    db.refresh(reset_token)

    # No mail transport: the link goes to the application log
    logger.info("Password reset link for %s: %s/reset-password?token=%s",
                user.email, settings.APP_URL.rstrip("/"), reset_token.token)
    write_log(db, user_id=user.id, action="PASSWORD_RESET_REQUEST", resource="auth", ip=ip)
    return reset_token


def reset_password(db: Session, token: str, password: str, ip: Optional[str] = None) -> None:
    if not token:
        raise InvalidResetToken()
    _check_password(password)

    reset_token = db.query(PasswordResetToken).filter(PasswordResetToken.token == token).first()
    if reset_token is None:
        raise InvalidResetToken()

    if reset_token.expires_at < datetime.now():
        db.delete(reset_token)
        commit(db)
        raise ExpiredResetToken()

    user = db.get(User, reset_token.user_id)
    if user is None:
        db.delete(reset_token)
        commit(db)
        raise InvalidResetToken()

    user.password_hash = get_password_hash(password)
    db.delete(reset_token)
    commit(db)
    write_log(db, user_id=user.id, action="PASSWORD_RESET", resource="auth", ip=ip)


# -----------------------------
# Manager accounts (owner only)
# -----------------------------

def _get_manager(db: Session, manager_id: str) -> User:
    user = db.get(User, manager_id)
    if user is None or user.role != Role.MANAGER:
        raise UserNotFound("Manager not found.")
    return user


def list_managers(db: Session, actor: Optional[Actor]) -> List[User]:
    require_role(actor, Role.OWNER)
    return db.query(User).filter(User.role == Role.MANAGER).order_by(User.created_at.desc()).all()


def create_manager(db: Session, actor: Optional[Actor], payload: ManagerCreate, ip: Optional[str] = None) -> User:
    actor = require_role(actor, Role.OWNER)
    manager = _create_user(db, email=payload.email, password=payload.password, role=Role.MANAGER,
                           name=payload.name, phone=payload.phone)
    write_log(db, user_id=actor.user_id, action="MANAGER_CREATE", resource="users", ip=ip,
              meta={"manager_id": manager.id, "email": manager.email})
    return manager


def update_manager(db: Session, actor: Optional[Actor], manager_id: str, payload: ManagerUpdate,
                   ip: Optional[str] = None) -> User:
    """Partial update: fields left out of the payload are not touched."""
    actor = require_role(actor, Role.OWNER)
    manager = _get_manager(db, manager_id)
    changes = payload.model_dump(exclude_unset=True)

    if "email" in changes:
        new_email = normalize_email(changes["email"])
        other = find_by_email(db, new_email)
        if other is not None and other.id != manager.id:
            raise EmailAlreadyRegistered()
        manager.email = new_email
    if "name" in changes:
        manager.name = _optional(changes["name"])
    if "phone" in changes:
        manager.phone = _optional(changes["phone"])
    if changes.get("password"):
        _check_password(changes["password"])
        manager.password_hash = get_password_hash(changes["password"])

    commit(db)
    db.refresh(manager)
    write_log(db, user_id=actor.user_id, action="MANAGER_UPDATE", resource="users", ip=ip,
              meta={"manager_id": manager.id, "fields": sorted(changes)})
    return manager


def delete_manager(db: Session, actor: Optional[Actor], manager_id: str, ip: Optional[str] = None) -> None:
    """Delete a manager. Orders they rang up stay, without the back-reference."""
    actor = require_role(actor, Role.OWNER)
    manager = _get_manager(db, manager_id)

    db.query(Order).filter(Order.manager_id == manager.id).update({Order.manager_id: None}, synchronize_session=False)
    db.query(Favorite).filter(Favorite.user_id == manager.id).delete(synchronize_session=False)
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == manager.id).delete(synchronize_session=False)
    db.delete(manager)
    commit(db)
    write_log(db, user_id=actor.user_id, action="MANAGER_DELETE", resource="users", ip=ip,
              meta={"manager_id": manager_id})
