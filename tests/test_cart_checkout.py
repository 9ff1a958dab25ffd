# tests/test_cart_checkout.py
import pytest

from marketplace.models.identity_models import Identity
from marketplace.models.order_models import DeliveryOption
from marketplace.models.promo_models import PromoCode, PromoResult
from marketplace.services.commerce.cart_service import CartService
from marketplace.services.commerce.checkout_service import CheckoutService, compute_totals

from tests.factories import product, store

CUSTOMER = Identity(
    is_logged_in=True, user_id="u1", role="customer",
    email="sam@shop.test", first_name="Sam", last_name="Buyer",
)

CHECKOUT = {
    "paymentMethod": "card",
    "deliveryOption": "standard",
    "deliveryLocation": {
        "firstName": "Sam",
        "lastName": "Buyer",
        "email": "sam@shop.test",
        "phone": "555-0101",
        "address": "1 Farm Rd",
        "city": "Springfield",
    },
}


@pytest.fixture
def catalog(db):
    store(db, "products",
          product("p1", farm_id="F1", farm_name="Green Acres", price=10),
          product("p2", price=2.5, status="approved"),
          product("p3", status="inactive"))


def test_compute_totals():
    t = compute_totals(100, DeliveryOption.express)
    assert t == pytest.approx({"subtotal": 100, "tax": 8, "delivery": 12, "discount": 0, "total": 120})

    free = PromoResult(valid=True, freeShipping=True)
    assert compute_totals(100, DeliveryOption.standard, free)["delivery"] == 0

    big = PromoResult(valid=True, discount=500)
    assert compute_totals(10, DeliveryOption.standard, big)["total"] == 0


def test_add_merges_lines_and_carries_farm(catalog):
    CartService.add_item("u1", "p1", 2)
    out = CartService.add_item("u1", "p1", 1)

    cart = out["cart"]
    assert cart["totalItems"] == 3
    assert cart["items"][0]["farmId"] == "F1"
    assert cart["items"][0]["farmName"] == "Green Acres"
    assert cart["subtotal"] == 30.0


def test_only_live_products_can_be_added(catalog):
    assert CartService.add_item("u1", "p3")["error"] == "validation"
    assert CartService.add_item("u1", "missing")["error"] == "not_found"
    assert CartService.add_item("u1", "p2")["ok"]


def test_update_quantity_removes_line_at_zero(catalog):
    CartService.add_item("u1", "p1", 2)
    assert CartService.update_quantity("u1", "p1", -1)["cart"]["totalItems"] == 1
    assert CartService.update_quantity("u1", "p1", -1)["cart"]["items"] == []
    assert CartService.remove_item("u1", "p1")["error"] == "not_found"


def test_guest_cart_folds_into_user_cart(db, catalog):
    CartService.add_item("guest-abc", "p1", 2)
    CartService.add_item("guest-abc", "p2", 1)
    CartService.add_item("u1", "p1", 1)

    out = CartService.merge_carts("guest-abc", "u1")
    assert out["merged"] == 2

    cart = CartService.get_cart("u1")
    assert {i.id: i.quantity for i in cart.items} == {"p1": 3, "p2": 1}
    assert db.carts.find_one({"id": "guest-abc"}) is None


def test_merging_an_empty_guest_cart_is_a_no_op(db, catalog):
    CartService.add_item("u1", "p1", 1)
    assert CartService.merge_carts("guest-none", "u1") == {"ok": True, "merged": 0}
    assert CartService.get_cart("u1").total_items == 1


def test_invalid_stored_items_are_dropped(db):
    db.carts.insert_one({"id": "u1", "items": [{"id": "p1", "price": 3, "quantity": 2}, {"price": -1}]})
    cart = CartService.get_cart("u1")
    assert [i.id for i in cart.items] == ["p1"]


def test_summary_previews_promo_without_counting(db, catalog):
    db.promo_codes.insert_one(
        PromoCode(id="promo_1", code="SAVE5", type="fixed", value=5).model_dump(mode="json")
    )
    CartService.add_item("u1", "p1", 2)

    summary = CartService.summary(CartService.get_cart("u1"), "standard", "SAVE5")
    assert summary["totals"] == {"subtotal": 20.0, "tax": 1.6, "delivery": 5.0, "discount": 5.0, "total": 21.6}
    assert summary["promo"]["valid"]
    assert db.promo_codes.find_one({"code": "SAVE5"})["usedCount"] == 0


def test_place_order(db, catalog):
    db.promo_codes.insert_one(
        PromoCode(id="promo_1", code="SHIPFREE", type="free_shipping").model_dump(mode="json")
    )
    CartService.add_item("u1", "p1", 2)

    out = CheckoutService.place_order(CUSTOMER, {**CHECKOUT, "promoCode": "shipfree"})

    assert out["ok"]
    order = out["order"]
    assert order["id"].startswith("FA-")
    assert order["status"] == "pending"
    assert order["userName"] == "Sam Buyer"
    assert order["items"][0]["farmId"] == "F1"
    assert order["promoCode"] == "SHIPFREE"
    assert order["delivery"]["fee"] == 0
    assert order["totals"]["total"] == pytest.approx(21.6)
    assert db.orders.count_documents({}) == 1
    assert CartService.get_cart("u1").items == []
    assert db.promo_codes.find_one({"code": "SHIPFREE"})["usedCount"] == 1


def test_place_order_rejections(db, catalog):
    guest = Identity.guest()
    assert CheckoutService.place_order(guest, CHECKOUT)["error"] == "auth"
    assert CheckoutService.place_order(CUSTOMER, CHECKOUT)["message"] == "Your cart is empty"

    CartService.add_item("u1", "p1")
    bad_email = {**CHECKOUT, "deliveryLocation": {**CHECKOUT["deliveryLocation"], "email": "nope"}}
    assert "valid email" in CheckoutService.place_order(CUSTOMER, bad_email)["message"]

    no_payment = {**CHECKOUT, "paymentMethod": "barter"}
    assert CheckoutService.place_order(CUSTOMER, no_payment)["message"] == "Please select a payment method"

    bad_promo = {**CHECKOUT, "promoCode": "GHOST"}
    assert CheckoutService.place_order(CUSTOMER, bad_promo)["message"] == "Invalid promo code"
    assert db.orders.count_documents({}) == 0
