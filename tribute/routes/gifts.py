from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status

from tribute.catalog import GiftCatalog, get_catalog
from tribute.deps import get_redemption_service
from tribute.schemas import (
    BalanceSchema,
    Confirmation,
    GiftCategorySchema,
    GiftSchema,
    RedeemRequest,
)
from tribute.services.redemption import RedemptionService

router = APIRouter(prefix="/api/v1", tags=["Gifts"])
logger = logging.getLogger(__name__)


@router.get("/gifts", response_model=List[GiftCategorySchema])
async def list_gifts(catalog: GiftCatalog = Depends(get_catalog)):
    """
    Returns the gift catalog grouped by category.
    """
    return [
        GiftCategorySchema(
            category=category,
            label=category.label,
            gifts=[GiftSchema.from_option(g) for g in gifts],
        )
        for category, gifts in catalog.by_category().items()
    ]


@router.get("/balance", response_model=BalanceSchema)
async def get_balance(service: RedemptionService = Depends(get_redemption_service)):
    return BalanceSchema(amount=await service.get_balance())


@router.post("/orders", response_model=Confirmation, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: RedeemRequest,
    background_tasks: BackgroundTasks,
    service: RedemptionService = Depends(get_redemption_service),
):
    """
    Redeems a gift. The owner notification runs after the response is sent
    and its outcome is only logged.
    """
    confirmation = await service.redeem(
        gift_id=data.gift_id,
        delivery_address=data.delivery_address,
        delivery_instructions=data.delivery_instructions,
        preferred_time=data.preferred_time,
        balance=data.balance,
    )
    background_tasks.add_task(service.notify_owner, confirmation.notification)
    return confirmation
