"""Convenience exports for schema layer."""
from .auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from .catalog import BrandCreate, BrandResponse, BrandUpdate, CategoryCreate, CategoryResponse, CategoryUpdate
from .chat import ChatRequest, ChatResponse
from .common import CommonResponse
from .manuals import ManualResponse
from .product_models import PersonalModelUpdate, ProductModelResponse, PublicModelUpdate

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
    "BrandCreate",
    "BrandResponse",
    "BrandUpdate",
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "ChatRequest",
    "ChatResponse",
    "CommonResponse",
    "ManualResponse",
    "PersonalModelUpdate",
    "ProductModelResponse",
    "PublicModelUpdate",
]
