"""SQLAlchemy ORM model for stored manual documents."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from manualhub.database import Base


class Manual(Base):
    __tablename__ = "manuals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(512), nullable=False)
    # Bare storage key for current rows; legacy rows may still carry a full path.
    file_path = Column(String(1024), nullable=False, unique=True)
    model_name = Column(String(255), nullable=False, index=True)
    upload_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    uploader_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    ml_processed = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    product_model_id = Column(
        Integer,
        ForeignKey("product_models.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    uploader = relationship("User", back_populates="uploaded_manuals", foreign_keys=[uploader_id])
    product_model = relationship("ProductModel", foreign_keys=[product_model_id])


__all__ = ["Manual"]
