"""
Per-owner credit ledger.

Balances live in the ``credit_accounts`` table.  A deduction is a single
conditional UPDATE, so two concurrent deductions can never take the same
credits twice and a balance never goes negative.

Storage failures are logged and reported as ``False`` / ``0``; callers
treat them like "not enough credits" rather than crashing.

Usage:
    from services.credit_service import CreditService

    ledger = CreditService()
    if ledger.deduct(user_id, 100):
        ...
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from lib.db import CreditAccount, get_session_factory

logger = logging.getLogger(__name__)

DEFAULT_STARTING_CREDITS = 1000


class CreditService:
    """Reads and mutates credit balances keyed by owner id."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        starting_credits: Optional[int] = None,
    ):
        if starting_credits is None:
            from config.settings import settings

            starting_credits = settings.STARTING_CREDITS
        self.session_factory = session_factory or get_session_factory()
        self.starting_credits = starting_credits

    def get_balance(self, owner_id: str) -> int:
        """Current balance; the account is created on first access."""
        if not owner_id:
            return 0

        try:
            with self.session_factory() as session:
                credits = session.scalar(
                    select(CreditAccount.credits).where(CreditAccount.owner_id == owner_id)
                )
                if credits is not None:
                    return credits

                session.add(CreditAccount(owner_id=owner_id, credits=self.starting_credits))
                try:
                    session.commit()
                    logger.info("Created credit account for %s with %d credits", owner_id, self.starting_credits)
                    return self.starting_credits
                except IntegrityError:
                    # Another request created the account first.
                    session.rollback()
                    return session.scalar(
                        select(CreditAccount.credits).where(CreditAccount.owner_id == owner_id)
                    ) or 0
        except SQLAlchemyError:
            logger.error("Error getting credits for %s", owner_id, exc_info=True)
            return 0

    def deduct(self, owner_id: str, amount: int) -> bool:
        """Take ``amount`` credits iff the balance covers it."""
        if not owner_id or amount < 0:
            return False

        try:
            with self.session_factory() as session:
                result = session.execute(
                    update(CreditAccount)
                    .where(CreditAccount.owner_id == owner_id, CreditAccount.credits >= amount)
                    .values(credits=CreditAccount.credits - amount)
                )
                session.commit()
        except SQLAlchemyError:
            logger.error("Error deducting %d credits from %s", amount, owner_id, exc_info=True)
            return False

        if result.rowcount != 1:
            logger.warning("Deduction of %d credits rejected for %s", amount, owner_id)
            return False
        return True

    def add(self, owner_id: str, amount: int) -> bool:
        """Credit ``amount``; ``False`` when the owner has no account."""
        if not owner_id or amount < 0:
            return False

        try:
            with self.session_factory() as session:
                result = session.execute(
                    update(CreditAccount)
                    .where(CreditAccount.owner_id == owner_id)
                    .values(credits=CreditAccount.credits + amount)
                )
                session.commit()
        except SQLAlchemyError:
            logger.error("Error adding %d credits to %s", amount, owner_id, exc_info=True)
            return False

        return result.rowcount == 1
