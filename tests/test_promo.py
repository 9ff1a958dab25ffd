# tests/test_promo.py
from datetime import datetime, timedelta, timezone

import pytest

from marketplace.models.promo_models import PromoCode, PromoStatus
from marketplace.services.commerce.promo_service import PromoService

from tests.factories import NOW


def make_promo(db, code="SAVE5", type="fixed", value=5, **extra):
    promo = PromoCode(id=f"promo_{code}", code=code, type=type, value=value, **extra)
    db.promo_codes.insert_one(promo.model_dump(mode="json"))
    return promo


def used_count(db, code):
    return db.promo_codes.find_one({"code": code})["usedCount"]


def test_fixed_discount_is_clamped_to_subtotal(db):
    make_promo(db)
    result = PromoService.quote("SAVE5", 3.00, now=NOW)
    assert result.valid
    assert result.discount == pytest.approx(3.00)


def test_percentage_and_free_shipping(db):
    make_promo(db, code="TEN", type="percentage", value=10)
    make_promo(db, code="SHIP", type="free_shipping", value=0)

    assert PromoService.quote("ten", 80, now=NOW).discount == pytest.approx(8.0)
    ship = PromoService.quote("SHIP", 80, now=NOW)
    assert ship.valid and ship.freeShipping and ship.discount == 0


@pytest.mark.parametrize("extra, message", [
    ({"enabled": False}, "Invalid promo code"),
    ({"startDate": NOW + timedelta(days=2)}, "Promo code starts on 17 Jun 2026"),
    ({"expiryDate": NOW - timedelta(days=1)}, "Promo code has expired"),
    ({"minOrder": 50}, "Minimum order of $50.00 required"),
    ({"maxUses": 3, "usedCount": 3}, "Promo code usage limit reached"),
])
def test_rejections(db, extra, message):
    make_promo(db, **extra)
    result = PromoService.quote("SAVE5", 20, now=NOW)
    assert not result.valid
    assert result.message == message


def test_unknown_code(db):
    assert PromoService.quote("NOPE", 20).message == "Invalid promo code"


def test_expiry_is_checked_before_minimum_order(db):
    make_promo(db, expiryDate=NOW - timedelta(days=1), minOrder=50)
    assert PromoService.quote("SAVE5", 10, now=NOW).message == "Promo code has expired"


def test_quote_has_no_side_effect_but_apply_counts(db):
    make_promo(db)
    PromoService.quote("SAVE5", 20, now=NOW)
    assert used_count(db, "SAVE5") == 0

    PromoService.apply("SAVE5", 20, now=NOW)
    PromoService.apply("SAVE5", 20, now=NOW)
    assert used_count(db, "SAVE5") == 2


def test_apply_is_idempotent_per_order(db):
    make_promo(db)
    assert PromoService.apply("SAVE5", 20, order_id="FA-1", now=NOW).valid
    assert PromoService.apply("SAVE5", 20, order_id="FA-1", now=NOW).valid
    PromoService.apply("SAVE5", 20, order_id="FA-2", now=NOW)
    assert used_count(db, "SAVE5") == 2


def test_status_is_derived():
    base = dict(id="p", code="X", type="fixed", value=1)
    assert PromoCode(**base).status_at(NOW) == PromoStatus.active
    assert PromoCode(**base, enabled=False, expiryDate=NOW - timedelta(days=1)).status_at(NOW) == PromoStatus.inactive
    assert PromoCode(**base, expiryDate=NOW - timedelta(days=1)).status_at(NOW) == PromoStatus.expired
    assert PromoCode(**base, startDate=NOW + timedelta(days=1)).status_at(NOW) == PromoStatus.scheduled


def test_legacy_stored_status_maps_to_enabled():
    legacy = {"id": "p", "code": "OLD", "type": "fixed", "value": 1, "status": "inactive"}
    assert PromoCode.model_validate(legacy).enabled is False
    legacy["status"] = "active"
    assert PromoCode.model_validate(legacy).enabled is True


def test_create_code_trims_and_uppercases(db):
    out = PromoService.create_code({"code": "  summer10 ", "type": "percentage", "value": 10}, now=NOW)
    assert out["ok"]
    assert out["promo"]["code"] == "SUMMER10"
    assert out["promo"]["status"] == "active"
    assert out["promo"]["usedCount"] == 0

    dup = PromoService.create_code({"code": "SUMMER10", "type": "fixed", "value": 5}, now=NOW)
    assert dup == {"ok": False, "error": "validation", "message": "Promo code already exists"}


@pytest.mark.parametrize("payload, message", [
    ({"code": "BIG", "type": "percentage", "value": 150}, "Percentage must be between 1 and 100"),
    ({"code": "ZERO", "type": "fixed", "value": 0}, "Fixed amount must be greater than 0"),
    ({"code": "!!!", "type": "fixed", "value": 5}, "Promo code must contain only letters and numbers"),
    ({"code": "SAVE-5", "type": "fixed", "value": 5}, "Promo code must contain only letters and numbers"),
    ({"code": "summer 10", "type": "fixed", "value": 5}, "Promo code must contain only letters and numbers"),
    (
        {"code": "BACK", "type": "fixed", "value": 5,
         "startDate": "2026-07-01T00:00:00Z", "expiryDate": "2026-06-01T00:00:00Z"},
        "Expiry date must be after start date",
    ),
])
def test_create_code_rejections(db, payload, message):
    out = PromoService.create_code(payload, now=NOW)
    assert not out["ok"]
    assert out["message"] == message


def test_free_shipping_value_is_forced_to_zero(db):
    out = PromoService.create_code({"code": "FREESHIP", "type": "free_shipping", "value": 9}, now=NOW)
    assert out["promo"]["value"] == 0


def test_toggle_and_delete(db):
    promo = make_promo(db)
    assert PromoService.set_enabled(promo.id, False)["promo"]["status"] == "inactive"
    assert not PromoService.quote("SAVE5", 20).valid
    assert PromoService.delete_code(promo.id)["ok"]
    assert PromoService.delete_code(promo.id)["error"] == "not_found"
