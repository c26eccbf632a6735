from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tribute.catalog import get_catalog
from tribute.config import get_settings
from tribute.db import get_db
from tribute.services.notifications import EmailDispatcher, WhatsAppDispatcher, get_dispatcher
from tribute.services.redemption import RedemptionService


def get_redemption_service(db: AsyncSession = Depends(get_db)) -> RedemptionService:
    return RedemptionService(
        db=db,
        catalog=get_catalog(),
        dispatcher=get_dispatcher(),
        settings=get_settings(),
    )


def get_email_dispatcher() -> EmailDispatcher:
    return EmailDispatcher(get_settings())


def get_whatsapp_dispatcher() -> WhatsAppDispatcher:
    return WhatsAppDispatcher(get_settings())
