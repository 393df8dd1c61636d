"""
API route handlers for the rental marketplace.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .applications import router as applications_router
from .payments import router as payments_router
from .rental_agreements import router as rental_agreements_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "properties_router",
    "applications_router",
    "payments_router",
    "rental_agreements_router",
    "users_router",
]
