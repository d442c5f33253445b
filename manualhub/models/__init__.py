"""Convenience exports for ORM models."""
from .brand import Brand, Category
from .manual import Manual
from .product_model import ProductModel
from .user import ROLE_ADMIN, ROLE_USER, User

__all__ = [
    "Brand",
    "Category",
    "Manual",
    "ProductModel",
    "User",
    "ROLE_ADMIN",
    "ROLE_USER",
]
