"""
User model for authentication and authorization.
"""
from typing import Optional
from datetime import datetime
from sqlalchemy import String, DateTime, Text, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from wms.core.database import Base


class User(Base):
    """User account model."""

    __tablename__ = "users"

    # User credentials
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile information
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Role decides module access, see wms.core.permissions
    role: Mapped[str] = mapped_column(String(20), default="USER", nullable=False)

    # Account status
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE", nullable=False)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


# Emails are unique regardless of case
Index("uq_users_email_lower", func.lower(User.email), unique=True)
