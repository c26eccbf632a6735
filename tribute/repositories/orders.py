from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tribute.models import GiftOrder


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        gift_type: str,
        delivery_address: str,
        delivery_instructions: Optional[str],
        preferred_time: Optional[str],
        price: int,
    ) -> GiftOrder:
        order = GiftOrder(
            gift_type=gift_type,
            delivery_address=delivery_address,
            delivery_instructions=delivery_instructions,
            preferred_time=preferred_time,
            price=price,
        )
        self.session.add(order)
        await self.session.commit()
        return order

    async def list_orders(self) -> List[GiftOrder]:
        stmt = select(GiftOrder).order_by(GiftOrder.created_at.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(GiftOrder))
        return result.scalar_one()
