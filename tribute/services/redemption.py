from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tribute.catalog import GiftCatalog, GiftOption
from tribute.config import Settings
from tribute.repositories.balance import BalanceRepository
from tribute.repositories.orders import OrderRepository
from tribute.schemas import Confirmation, NotificationRequest
from tribute.services.notifications import NotificationDispatcher
from tribute.utils.errors import (
    BalanceUnavailable,
    BalanceUpdateError,
    InsufficientBalance,
    InvalidGift,
    MissingInformation,
    OrderPersistenceError,
)

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RedemptionService:
    """
    Redeems a catalog gift against the shared balance.

    The order insert and the balance debit are committed separately. If the
    debit fails the order row stays where it is; nothing is compensated and
    nothing is retried.
    """

    def __init__(
        self,
        db: AsyncSession,
        catalog: GiftCatalog,
        dispatcher: NotificationDispatcher,
        settings: Settings,
    ):
        self.db = db
        self.catalog = catalog
        self.dispatcher = dispatcher
        self.settings = settings
        self.balances = BalanceRepository(db)
        self.orders = OrderRepository(db)

    async def get_balance(self) -> int:
        return await self.balances.get_amount()

    def _preferred_time_required(self, gift: Optional[GiftOption]) -> bool:
        if gift is not None and gift.requires_preferred_time is not None:
            return gift.requires_preferred_time
        return self.settings.preferred_time_required

    async def redeem(
        self,
        gift_id: str,
        delivery_address: Optional[str],
        delivery_instructions: Optional[str] = None,
        preferred_time: Optional[str] = None,
        balance: Optional[int] = None,
    ) -> Confirmation:
        preferred_time = _clean(preferred_time)
        delivery_instructions = _clean(delivery_instructions)
        delivery_address = _clean(delivery_address) or _clean(self.settings.default_delivery_address)

        gift = self.catalog.get(gift_id)

        if preferred_time is None and self._preferred_time_required(gift):
            logger.warning(f"Redemption of '{gift_id}' rejected: preferred time missing")
            raise MissingInformation(
                "Please fill in your preferred delivery time",
                {"field": "preferred_time"},
            )
        if delivery_address is None:
            logger.warning(f"Redemption of '{gift_id}' rejected: delivery address missing")
            raise MissingInformation(
                "Please fill in the delivery address",
                {"field": "delivery_address"},
            )

        if gift is None:
            logger.warning(f"Redemption rejected: unknown gift '{gift_id}'")
            raise InvalidGift(gift_id)

        stored = await self.balances.get_amount()
        if stored < gift.price:
            logger.warning(f"Redemption of '{gift_id}' rejected: balance {stored} < price {gift.price}")
            raise InsufficientBalance(stored, gift.price)
        # A caller-supplied balance is what the visitor last saw; it never replaces the stored one.
        if balance is not None and balance != stored:
            logger.warning(f"Redemption of '{gift_id}' rejected: caller saw {balance}, stored {stored}")
            raise BalanceUpdateError(
                "The balance changed since the page was loaded. Please refresh and try again."
            )
        balance = stored

        try:
            order = await self.orders.create_order(
                gift_type=gift.gift_type.value,
                delivery_address=delivery_address,
                delivery_instructions=delivery_instructions,
                preferred_time=preferred_time,
                price=gift.price,
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating order for '{gift_id}': {e}")
            raise OrderPersistenceError() from e
        order_id = order.id

        new_balance = balance - gift.price
        try:
            updated = await self.balances.compare_and_set(balance, new_balance)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating balance after order {order_id}: {e}")
            raise BalanceUpdateError() from e
        if not updated:
            logger.error(
                f"Balance changed since it was read ({balance}); order {order_id} kept without debit"
            )
            raise BalanceUpdateError(
                "The balance changed while your order was being placed. Please refresh and try again."
            )

        try:
            new_balance = await self.balances.get_amount()
        except BalanceUnavailable:
            logger.warning(f"Could not re-read balance after order {order_id}, assuming {new_balance}")

        logger.info(f"Order {order_id} created for '{gift.gift_type.value}', balance now {new_balance}")
        return Confirmation(
            order_id=order_id,
            gift_id=gift.id,
            gift_name=gift.name,
            gift_type=gift.gift_type.value,
            price=gift.price,
            balance=new_balance,
            notification=NotificationRequest(
                gift_type=gift.gift_type.value,
                delivery_address=delivery_address,
                delivery_instructions=delivery_instructions,
                preferred_time=preferred_time,
            ),
        )

    async def notify_owner(self, request: NotificationRequest) -> bool:
        """Best-effort; failures are logged and never raised."""
        try:
            await self.dispatcher.notify(request)
            return True
        except Exception as e:
            logger.error(f"Error sending order notification: {e}")
            return False
