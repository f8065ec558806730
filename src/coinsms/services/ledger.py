"""Coin balance mutations.

Balances are changed only through single conditional UPDATE statements so two
concurrent requests can never both spend the same coins: the WHERE clause is
the sufficiency check, and a statement that matches no row means the check
failed. The stored balance is always re-read, never cached.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from coinsms.models import Profile

logger = logging.getLogger(__name__)


class CoinLedger:
    """Reads and conditionally updates ``profiles.credits_balance``."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_profile(self, account_id: str) -> Profile | None:
        return self.db.get(Profile, account_id, populate_existing=True)

    def balance_of(self, account_id: str) -> int | None:
        """Return the stored balance, or None if the profile does not exist."""
        return self.db.execute(
            select(Profile.credits_balance).where(Profile.id == account_id)
        ).scalar_one_or_none()

    def debit(self, account_id: str, cost: int) -> int | None:
        """Take ``cost`` coins if the balance covers them.

        Returns:
            The balance after the debit, or None if the balance was too low.

        Raises:
            SQLAlchemyError: If the store rejects the write. The session is
                rolled back first.
        """
        if cost < 0:
            raise ValueError("cost must be non-negative")
        try:
            result = self.db.execute(
                update(Profile)
                .where(Profile.id == account_id, Profile.credits_balance >= cost)
                .values(credits_balance=Profile.credits_balance - cost)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.rollback()
                return None
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.balance_of(account_id)

    def credit(self, account_id: str, amount: int) -> int | None:
        """Add ``amount`` coins, or remove them when negative.

        A negative adjustment never takes the balance below zero.

        Returns:
            The new balance, or None if the profile is missing or the
            adjustment would make the balance negative.
        """
        statement = (
            update(Profile)
            .where(Profile.id == account_id)
            .values(credits_balance=Profile.credits_balance + amount)
            .execution_options(synchronize_session=False)
        )
        if amount < 0:
            statement = statement.where(Profile.credits_balance >= -amount)
        try:
            result = self.db.execute(statement)
            if result.rowcount == 0:
                self.db.rollback()
                return None
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.balance_of(account_id)
