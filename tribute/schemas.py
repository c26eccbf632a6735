from __future__ import annotations

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from tribute.catalog import GiftCategory, GiftOption


class NotificationRequest(BaseModel):
    gift_type: str
    delivery_address: str
    delivery_instructions: Optional[str] = None
    preferred_time: Optional[str] = None


class RedeemRequest(BaseModel):
    gift_id: str = Field(..., min_length=1)
    delivery_address: str = ""
    delivery_instructions: Optional[str] = None
    preferred_time: Optional[str] = None
    # Last balance the client saw; used as the optimistic guard when present.
    balance: Optional[int] = Field(None, ge=0)


class Confirmation(BaseModel):
    order_id: uuid.UUID
    gift_id: str
    gift_name: str
    gift_type: str
    price: int
    balance: int
    notification: NotificationRequest = Field(..., exclude=True)


class BalanceSchema(BaseModel):
    amount: int


class GiftSchema(BaseModel):
    id: str
    name: str
    gift_type: str
    price: int
    description: str

    @classmethod
    def from_option(cls, option: GiftOption) -> "GiftSchema":
        return cls(
            id=option.id,
            name=option.name,
            gift_type=option.gift_type.value,
            price=option.price,
            description=option.description,
        )


class GiftCategorySchema(BaseModel):
    category: GiftCategory
    label: str
    gifts: List[GiftSchema]
