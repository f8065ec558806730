# src/coinsms/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .accounts import router as accounts_router
from .admin import router as admin_router
from .sms import router as sms_router

__all__ = [
    "accounts_router",
    "admin_router",
    "sms_router",
]
