# bledor/utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from bledor.config import settings
from bledor.database import get_db
from bledor.core.access import Actor
from bledor.core.errors import Unauthenticated
from bledor.models.users import User

# Missing credentials are not an error here: each operation decides
bearer_scheme = HTTPBearer(auto_error=False)

# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def issue_token_for(user: User) -> str:
    return create_access_token(data={"sub": user.id, "role": user.role.value})

# Look up the user a bearer token belongs to, None when the token is missing or invalid
def _user_from_credentials(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[User]:
    if credentials is None:
        return None
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("sub")
    if user_id is None:
        return None
    return db.get(User, user_id)

# Identity provider: resolve the calling actor, or None for anonymous requests.
# The role is read from the database so role changes apply to live tokens.
def resolve_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    user = _user_from_credentials(credentials, db)
    if user is None:
        return None
    return Actor(user_id=user.id, role=user.role)

# Retrieve the authenticated user row, for handlers that need profile fields
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    user = _user_from_credentials(credentials, db)
    if user is None:
        raise Unauthenticated()
    return user
