# bledor/models/password_reset.py
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from bledor.database import Base, new_id

# One-time password reset credential. At most one live token per user.
class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(String(32), primary_key=True, default=new_id)
    token = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User")
