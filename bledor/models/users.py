# bledor/models/users.py
import enum
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Enum
from bledor.database import Base, new_id


class Role(str, enum.Enum):
    CLIENT = "CLIENT"
    MANAGER = "MANAGER"
    OWNER = "OWNER"


# Represents a user account with authentication details and system role.
# Emails are always stored trimmed and lowercased.
class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    role = Column(Enum(Role, native_enum=False, length=16), nullable=False, default=Role.CLIENT)
    marketing_opt_in = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
