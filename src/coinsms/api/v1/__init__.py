# src/coinsms/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import accounts_router, admin_router, sms_router

__all__ = [
    "accounts_router",
    "admin_router",
    "sms_router",
]
