from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from tribute.config import get_settings
from tribute.utils.errors import InvalidGift

logger = logging.getLogger(__name__)


class GiftCategory(str, Enum):
    FLOWERS = "flowers"
    CHOCOLATES = "chocolates"
    PLUSHIES = "plushies"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class GiftType(str, Enum):
    """Backend values stored in ``gift_orders.gift_type``."""

    ROSE_BOUQUET_3 = "3 rose bouquet"
    ROSE_BOUQUET_12 = "12 rose bouquet"
    TULIP_BUNCH = "tulip bunch"
    CHOCOLATE_BOX = "chocolate box"
    TRUFFLE_COLLECTION = "truffle collection"
    TEDDY_BEAR = "teddy bear"
    BUNNY_PLUSH = "bunny plush"
    FLOWERS = "flowers"
    CHOCOLATES = "chocolates"
    PLUSHIES = "plushies"


class GiftOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    category: GiftCategory
    name: str
    gift_type: GiftType
    price: int = Field(..., gt=0)
    description: str = "A token of my affection"
    # None means "follow the global policy"
    requires_preferred_time: Optional[bool] = None


DEFAULT_GIFTS: List[GiftOption] = [
    GiftOption(
        id="rose-bouquet-3",
        category=GiftCategory.FLOWERS,
        name="3 Rose Bouquet",
        gift_type=GiftType.ROSE_BOUQUET_3,
        price=300,
        description="Three red roses, hand tied",
    ),
    GiftOption(
        id="rose-bouquet-12",
        category=GiftCategory.FLOWERS,
        name="Dozen Roses",
        gift_type=GiftType.ROSE_BOUQUET_12,
        price=900,
        description="A full dozen for a full heart",
    ),
    GiftOption(
        id="tulip-bunch",
        category=GiftCategory.FLOWERS,
        name="Tulip Bunch",
        gift_type=GiftType.TULIP_BUNCH,
        price=250,
        description="Spring colours in a bunch",
    ),
    GiftOption(
        id="chocolate-box",
        category=GiftCategory.CHOCOLATES,
        name="Chocolate Box",
        gift_type=GiftType.CHOCOLATE_BOX,
        price=200,
        description="Assorted milk and dark chocolates",
    ),
    GiftOption(
        id="truffle-collection",
        category=GiftCategory.CHOCOLATES,
        name="Truffle Collection",
        gift_type=GiftType.TRUFFLE_COLLECTION,
        price=450,
        description="Twelve handmade truffles",
    ),
    GiftOption(
        id="teddy-bear",
        category=GiftCategory.PLUSHIES,
        name="Teddy Bear",
        gift_type=GiftType.TEDDY_BEAR,
        price=350,
        description="Soft, brown and very huggable",
    ),
    GiftOption(
        id="bunny-plush",
        category=GiftCategory.PLUSHIES,
        name="Bunny Plush",
        gift_type=GiftType.BUNNY_PLUSH,
        price=300,
        description="Floppy ears included",
    ),
]


class CatalogFile(BaseModel):
    gifts: List[GiftOption]


class GiftCatalog:
    """
    Immutable lookup of redeemable gifts.
    Built once at startup, either from DEFAULT_GIFTS or from a YAML file.
    """

    def __init__(self, gifts: Iterable[GiftOption]):
        self._gifts: Dict[str, GiftOption] = {}
        for gift in gifts:
            if gift.id in self._gifts:
                raise ValueError(f"Duplicate gift id '{gift.id}'")
            self._gifts[gift.id] = gift

    def get(self, gift_id: str) -> Optional[GiftOption]:
        return self._gifts.get(gift_id)

    def require(self, gift_id: str) -> GiftOption:
        gift = self.get(gift_id)
        if gift is None:
            raise InvalidGift(gift_id)
        return gift

    def price(self, gift_id: str) -> int:
        return self.require(gift_id).price

    def all(self) -> List[GiftOption]:
        return list(self._gifts.values())

    def by_category(self) -> Dict[GiftCategory, List[GiftOption]]:
        grouped: Dict[GiftCategory, List[GiftOption]] = {}
        for category in GiftCategory:
            items = [g for g in self._gifts.values() if g.category == category]
            if items:
                grouped[category] = items
        return grouped

    def __len__(self) -> int:
        return len(self._gifts)

    def __contains__(self, gift_id: object) -> bool:
        return gift_id in self._gifts

    @classmethod
    def flat(cls, names: Iterable[str], price: int) -> "GiftCatalog":
        """
        The earliest page offered three names ("Flowers", "Plushies",
        "Chocolates") at one implicit cost. Each name maps onto the category
        and gift type of the same name, so only those three names (any case)
        are accepted.
        """
        allowed = {c.value for c in GiftCategory}
        gifts = []
        for name in names:
            key = name.strip().lower()
            if key not in allowed:
                raise ValueError(
                    f"Flat catalog name '{name}' must be one of: {', '.join(sorted(allowed))}"
                )
            gifts.append(
                GiftOption(
                    id=key,
                    category=GiftCategory(key),
                    name=name,
                    gift_type=GiftType(key),
                    price=price,
                )
            )
        return cls(gifts)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "GiftCatalog":
        if path and os.path.exists(path):
            try:
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
                parsed = CatalogFile.model_validate(data)
                catalog = cls(parsed.gifts)
                logger.info(f"Loaded {len(catalog)} gifts from {path}")
                return catalog
            except Exception as e:
                logger.error(f"Failed to load gift catalog from {path}: {e}")

        logger.info("Using default gift catalog")
        return cls(DEFAULT_GIFTS)


_catalog: Optional[GiftCatalog] = None


def get_catalog() -> GiftCatalog:
    global _catalog
    if _catalog is None:
        _catalog = GiftCatalog.load(get_settings().catalog_path)
    return _catalog
