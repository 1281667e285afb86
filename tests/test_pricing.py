"""Tests for the lot-size pricing engine."""

import uuid
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidLotSize, PackageNotFound, ValidationError
from app.services.pricing import (
    AddOnSelection,
    PricedAddOn,
    PricingTiers,
    SizeCategory,
    calculate_price,
    merge_selections,
    size_category,
    to_money,
)


@pytest.mark.parametrize(
    "lot_size,expected",
    [
        (1, SizeCategory.SMALL),
        (4999, SizeCategory.SMALL),
        (5000, SizeCategory.MEDIUM),
        (9999, SizeCategory.MEDIUM),
        (10000, SizeCategory.LARGE),
        (14999, SizeCategory.LARGE),
        (15000, SizeCategory.XLARGE),
        (250000, SizeCategory.XLARGE),
    ],
)
def test_size_category_boundaries(lot_size, expected):
    """Tier lower bounds are inclusive."""
    assert size_category(lot_size) == expected


@pytest.mark.parametrize(
    "lot_size,expected",
    [(4999, "35.00"), (5000, "42.00"), (10000, "52.50"), (15000, "70.00")],
)
def test_standard_tiers_scale_base_price(lot_size, expected):
    breakdown = calculate_price(Decimal("35.00"), lot_size)
    assert breakdown.package_price == Decimal(expected)
    assert breakdown.total_price == Decimal(expected)


def test_add_ons_are_added_on_top():
    """35 x 1.2 for a medium lot plus a 30.00 add-on is 72.00."""
    weed_control = PricedAddOn(service_id=uuid.uuid4(), name="Weed Control", unit_price=Decimal("30.00"))
    breakdown = calculate_price(Decimal("35.00"), 7500, PricingTiers(), [weed_control])

    assert breakdown.size_category == SizeCategory.MEDIUM
    assert breakdown.multiplier == Decimal("1.2")
    assert breakdown.package_price == Decimal("42.00")
    assert breakdown.add_ons_total == Decimal("30.00")
    assert breakdown.total_price == Decimal("72.00")


def test_add_on_quantity_multiplies_unit_price():
    aeration = PricedAddOn(service_id=uuid.uuid4(), unit_price=Decimal("50.00"), quantity=3)
    assert aeration.line_total == Decimal("150.00")

    breakdown = calculate_price(Decimal("60.00"), 3000, add_ons=[aeration])
    assert breakdown.total_price == Decimal("210.00")


def test_custom_tiers_override_defaults():
    tiers = PricingTiers.from_json({"medium": "1.1", "xlarge": None})
    assert tiers.medium == Decimal("1.1")
    assert tiers.xlarge == Decimal("2.0")

    breakdown = calculate_price(Decimal("60.00"), 6000, tiers)
    assert breakdown.package_price == Decimal("66.00")


def test_rounding_is_half_up_to_cents():
    tiers = PricingTiers(medium=Decimal("1.15"))
    # 33.30 x 1.15 = 38.295
    assert calculate_price(Decimal("33.30"), 5000, tiers).package_price == Decimal("38.30")
    assert to_money("0.005") == Decimal("0.01")


@pytest.mark.parametrize("lot_size", [0, -10, None])
def test_invalid_lot_size_rejected(lot_size):
    with pytest.raises(InvalidLotSize):
        calculate_price(Decimal("35.00"), lot_size)


def test_negative_base_price_rejected():
    with pytest.raises(ValidationError):
        calculate_price(Decimal("-1.00"), 5000)


def test_merge_selections_sums_repeated_ids():
    sid = uuid.uuid4()
    other = uuid.uuid4()
    merged = merge_selections(
        [AddOnSelection(service_id=sid), AddOnSelection(service_id=other, quantity=2), AddOnSelection(service_id=sid)]
    )
    assert merged == {sid: 2, other: 2}


@pytest.mark.asyncio
async def test_calculate_price_endpoint(client, catalog):
    resp = await client.post(
        "/api/v1/services/calculate-price",
        json={
            "service_package_id": str(catalog["packages"]["Basic Mow"].id),
            "lot_size": 7500,
            "add_ons": [
                {"service_id": str(catalog["add_ons"]["Weed Control"].id)},
                {"service_id": str(uuid.uuid4())},
            ],
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["size_category"] == "medium"
    assert Decimal(data["package_price"]) == Decimal("42.00")
    assert Decimal(data["total_price"]) == Decimal("72.00")
    assert len(data["add_ons"]) == 1
    assert len(data["warnings"]) == 1


@pytest.mark.asyncio
async def test_calculate_price_rejects_bad_lot(client, catalog):
    resp = await client.post(
        "/api/v1/services/calculate-price",
        json={"service_package_id": str(catalog["packages"]["Basic Mow"].id), "lot_size": 0},
    )
    assert resp.status_code in (400, 422)


@pytest.mark.asyncio
async def test_calculate_price_unknown_package(client, catalog, db):
    from app.services.pricing import get_active_package

    with pytest.raises(PackageNotFound):
        await get_active_package(db, uuid.uuid4())

    resp = await client.post(
        "/api/v1/services/calculate-price",
        json={"service_package_id": str(uuid.uuid4()), "lot_size": 5000},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_quick_quote_highlights_premium_care(client, catalog):
    resp = await client.post("/api/v1/services/quick-quote", json={"lot_size": 12000})
    assert resp.status_code == 200
    data = resp.json()
    assert data["size_category"] == "large"
    assert data["selected_package"]["name"] == "Premium Care"
    assert Decimal(data["selected_package"]["estimated_price"]) == Decimal("90.00")
    assert [p["name"] for p in data["all_packages"]] == ["Basic Mow", "Premium Care", "Deluxe Package"]
