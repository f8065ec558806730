# src/coinsms/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .account import ProfileResponse, ProfileUpdate, RegisterRequest, RegisterResponse
from .admin import (
    AddCreditsRequest,
    AddCreditsResponse,
    AdminUsersResponse,
    BanRequest,
    BanResponse,
    GatewayBalanceResponse,
    RatesReport,
)
from .sms import (
    QuoteRequest,
    QuoteResponse,
    RatesResponse,
    SendSmsRequest,
    SendSmsResponse,
    SmsHistoryItem,
)

__all__ = [
    "ProfileResponse", "ProfileUpdate", "RegisterRequest", "RegisterResponse",
    "AddCreditsRequest", "AddCreditsResponse", "AdminUsersResponse",
    "BanRequest", "BanResponse", "GatewayBalanceResponse", "RatesReport",
    "QuoteRequest", "QuoteResponse", "RatesResponse",
    "SendSmsRequest", "SendSmsResponse", "SmsHistoryItem",
]
