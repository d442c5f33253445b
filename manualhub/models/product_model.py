"""SQLAlchemy ORM model for catalog product models."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from manualhub.database import Base


class ProductModel(Base):
    """A public (category + brand) or personal (owner) catalog entry."""

    __tablename__ = "product_models"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    manual_id = Column(
        Integer,
        ForeignKey("manuals.id", ondelete="SET NULL", use_alter=True, name="fk_product_models_manual_id"),
        nullable=True,
        unique=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", foreign_keys=[category_id])
    brand = relationship("Brand", foreign_keys=[brand_id])
    owner = relationship("User", back_populates="personal_models", foreign_keys=[owner_id])
    manual = relationship("Manual", foreign_keys=[manual_id], post_update=True)

    @property
    def is_personal(self) -> bool:
        return self.owner_id is not None


__all__ = ["ProductModel"]
