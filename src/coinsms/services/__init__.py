# src/coinsms/services/__init__.py
"""Business logic services for the CoinSMS application."""

from .gateway import SmsGatewayClient
from .ledger import CoinLedger
from .rate_limit import AdmissionController
from .sms_sender import SmsSender

__all__ = [
    "AdmissionController",
    "CoinLedger",
    "SmsGatewayClient",
    "SmsSender",
]
