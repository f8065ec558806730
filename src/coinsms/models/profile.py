# src/coinsms/models/profile.py
"""Account profile holding the coin balance."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coinsms.db.session import Base
from coinsms.db.time import utcnow


class Profile(Base):
    """Profile of an identity issued by the hosted auth provider.

    The primary key is the provider's account id, so a profile exists at most
    once per identity. The balance is only ever changed through conditional
    updates in ``coinsms.services.ledger``.
    """

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("credits_balance >= 0", name="ck_profiles_credits_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    custom_id: Mapped[str | None] = mapped_column(String(16), unique=True, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits_balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")
    banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
