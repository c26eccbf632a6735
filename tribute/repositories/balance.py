from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tribute.models import Balance
from tribute.utils.errors import BalanceUnavailable

logger = logging.getLogger(__name__)


class BalanceRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_amount(self) -> int:
        stmt = select(Balance.amount).order_by(Balance.id.asc()).limit(1)
        try:
            result = await self.session.execute(stmt)
            amount = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching balance: {e}")
            raise BalanceUnavailable() from e
        if amount is None:
            logger.error("Error fetching balance: no balance row")
            raise BalanceUnavailable()
        return amount

    async def compare_and_set(self, expected: int, new_amount: int) -> bool:
        """
        Single-attempt optimistic update: only writes if the stored amount
        still equals ``expected``. Returns False when no row matched.
        """
        stmt = (
            update(Balance)
            .where(Balance.amount == expected)
            .values(amount=new_amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def set_amount(self, amount: int) -> Balance:
        """Owner top-up: create the row if missing, otherwise overwrite it."""
        stmt = select(Balance).order_by(Balance.id.asc()).limit(1)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            row = Balance(id=1, amount=amount)
            self.session.add(row)
        else:
            row.amount = amount
        await self.session.commit()
        return row
