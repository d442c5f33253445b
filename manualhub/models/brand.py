"""SQLAlchemy ORM models for brands and their categories."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from manualhub.database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    categories = relationship(
        "Category",
        back_populates="brand",
        cascade="all, delete-orphan",
        order_by="Category.id",
    )


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    brand = relationship("Brand", back_populates="categories")

    __table_args__ = (UniqueConstraint("brand_id", "name", name="uq_categories_brand_name"),)


__all__ = ["Brand", "Category"]
