from __future__ import annotations

import pytest

from tribute.catalog import DEFAULT_GIFTS, GiftCatalog, GiftCategory, GiftOption, GiftType
from tribute.utils.errors import InvalidGift

EXPECTED_PRICES = {
    "rose-bouquet-3": 300,
    "rose-bouquet-12": 900,
    "tulip-bunch": 250,
    "chocolate-box": 200,
    "truffle-collection": 450,
    "teddy-bear": 350,
    "bunny-plush": 300,
}


def test_every_gift_has_its_fixed_positive_price(catalog):
    assert {g.id for g in catalog.all()} == set(EXPECTED_PRICES)
    for gift_id, price in EXPECTED_PRICES.items():
        assert catalog.price(gift_id) == price
        assert catalog.price(gift_id) > 0


def test_lookup_returns_display_and_backend_values(catalog):
    gift = catalog.get("rose-bouquet-3")
    assert gift is not None
    assert gift.name == "3 Rose Bouquet"
    assert gift.gift_type == GiftType.ROSE_BOUQUET_3
    assert gift.gift_type.value == "3 rose bouquet"
    assert gift.category == GiftCategory.FLOWERS


def test_unknown_gift(catalog):
    assert catalog.get("diamond-ring") is None
    assert "diamond-ring" not in catalog
    with pytest.raises(InvalidGift) as exc:
        catalog.price("diamond-ring")
    assert exc.value.code == "invalid_gift"


def test_by_category_keeps_fixed_category_order(catalog):
    grouped = catalog.by_category()
    assert list(grouped) == [GiftCategory.FLOWERS, GiftCategory.CHOCOLATES, GiftCategory.PLUSHIES]
    assert [g.id for g in grouped[GiftCategory.PLUSHIES]] == ["teddy-bear", "bunny-plush"]


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError):
        GiftCatalog([DEFAULT_GIFTS[0], DEFAULT_GIFTS[0]])


def test_gift_price_must_be_positive():
    with pytest.raises(ValueError):
        GiftOption(
            id="free",
            category=GiftCategory.FLOWERS,
            name="Free Flower",
            gift_type=GiftType.FLOWERS,
            price=0,
        )


def test_flat_catalog_is_one_item_per_category():
    catalog = GiftCatalog.flat(["Flowers", "Plushies", "Chocolates"], price=100)
    assert len(catalog) == 3
    assert catalog.price("plushies") == 100
    assert catalog.get("flowers").gift_type == GiftType.FLOWERS
    assert set(catalog.by_category()) == set(GiftCategory)


def test_flat_catalog_rejects_names_without_a_category():
    with pytest.raises(ValueError, match="chocolates, flowers, plushies"):
        GiftCatalog.flat(["Flowers", "Jewellery"], price=100)


def test_load_from_yaml(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "gifts:\n"
        "  - id: roses\n"
        "    category: flowers\n"
        "    name: Roses\n"
        "    gift_type: 3 rose bouquet\n"
        "    price: 120\n"
        "    requires_preferred_time: false\n"
    )
    catalog = GiftCatalog.load(str(path))
    assert len(catalog) == 1
    assert catalog.price("roses") == 120
    assert catalog.get("roses").requires_preferred_time is False


def test_load_falls_back_to_defaults(tmp_path):
    missing = GiftCatalog.load(str(tmp_path / "nope.yaml"))
    assert len(missing) == len(DEFAULT_GIFTS)

    bad = tmp_path / "bad.yaml"
    bad.write_text("gifts:\n  - id: x\n    gift_type: not a real gift\n")
    invalid = GiftCatalog.load(str(bad))
    assert len(invalid) == len(DEFAULT_GIFTS)
