"""SQLAlchemy ORM model for application users."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from manualhub.database import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, server_default=ROLE_USER, default=ROLE_USER)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    personal_models = relationship("ProductModel", back_populates="owner", foreign_keys="ProductModel.owner_id")
    uploaded_manuals = relationship("Manual", back_populates="uploader", foreign_keys="Manual.uploader_id")

    @property
    def is_admin(self) -> bool:
        return (self.role or ROLE_USER).strip().lower() == ROLE_ADMIN


__all__ = ["User", "ROLE_ADMIN", "ROLE_USER"]
