"""Aggregate router exports."""
from .auth import router as auth_router
from .brands import router as brands_router
from .categories import router as categories_router
from .chat import router as chat_router
from .manuals import router as manuals_router
from .models import router as models_router

__all__ = [
    "auth_router",
    "brands_router",
    "categories_router",
    "chat_router",
    "manuals_router",
    "models_router",
]
