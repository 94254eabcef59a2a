# bledor/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from bledor.core import accounts
from bledor.database import get_db
from bledor.models.users import User
from bledor.schemas import user as schemas
from bledor.utils.audit import client_ip
from bledor.utils.tokenJWT import get_current_user, issue_token_for

router = APIRouter(tags=["Auth"])

# Register a new client account
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    return accounts.register_client(db, user, ip=client_ip(request))


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = accounts.authenticate(db, payload.email, payload.password, ip=client_ip(request))
    return {"access_token": issue_token_for(db_user), "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# Start a password reset. The answer is identical whether or not the email is known.
@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(payload: schemas.ForgotPasswordRequest, request: Request, db: Session = Depends(get_db)):
    accounts.request_password_reset(db, payload.email, ip=client_ip(request))
    return {"success": True, "message": accounts.RESET_NEUTRAL_MESSAGE}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(payload: schemas.ResetPasswordRequest, request: Request, db: Session = Depends(get_db)):
    accounts.reset_password(db, payload.token, payload.password, ip=client_ip(request))
    return {"success": True, "message": "Password updated."}
