# src/coinsms/models/__init__.py
"""SQLAlchemy models for the CoinSMS application."""

from .credit_purchase import CreditPurchase
from .profile import Profile
from .sms_history import SmsHistory, SmsStatus
from .sms_rate import SmsRate

__all__ = [
    "CreditPurchase",
    "Profile",
    "SmsHistory", "SmsStatus",
    "SmsRate",
]
