from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime

from bledor.models.users import Role

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials, email is normalized before lookup
class UserLogin(BaseModel):
    email: str
    password: str

# Schema for self-service registration (always a CLIENT account)
class UserCreate(UserBase):
    password: str
    name: Optional[str] = None
    phone: Optional[str] = None

# Output schema for user profile details
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: Role
    name: Optional[str] = None
    phone: Optional[str] = None
    marketing_opt_in: bool = False

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Client profile edit form
class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    marketing_opt_in: bool = False

# Password reset flow
class ForgotPasswordRequest(BaseModel):
    email: str

class ResetPasswordRequest(BaseModel):
    token: str
    password: str

class MessageResponse(BaseModel):
    success: bool = True
    message: str

# Owner-managed manager accounts
class ManagerCreate(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
    phone: Optional[str] = None

class ManagerUpdate(BaseModel):
    """All fields optional; omitted fields are left untouched."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None

class ManagerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
