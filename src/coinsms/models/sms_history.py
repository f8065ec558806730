# src/coinsms/models/sms_history.py
"""Models describing SMS delivery attempts."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coinsms.db.session import Base
from coinsms.db.time import utcnow


class SmsStatus(str, enum.Enum):
    """Lifecycle states of a delivery record.

    The send pipeline only ever writes ``sent`` or ``failed``; ``pending`` and
    ``delivered`` exist for delivery reports.
    """

    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


class SmsHistory(Base):
    """One row per submission that reached the SMS gateway.

    Rows are written once and never updated by the send pipeline. ``cost`` is
    zero exactly when ``status`` is ``failed``.
    """

    __tablename__ = "sms_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str | None] = mapped_column(String(8), nullable=True)
    operator: Mapped[str | None] = mapped_column(Text, nullable=True)
    cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[SmsStatus] = mapped_column(
        Enum(SmsStatus, name="sms_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    delivery_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # Gateway response body, kept verbatim for support requests.
    api_response: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
