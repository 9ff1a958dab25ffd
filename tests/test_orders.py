# tests/test_orders.py
from datetime import timedelta

import pytest

from marketplace.models.identity_models import Identity
from marketplace.models.order_models import OrderStatus
from marketplace.services.commerce.order_service import OrderService, can_transition

from tests.factories import NOW, farm, item, order, store


@pytest.fixture
def orders(db):
    store(db, "orders",
          order("FA-1", [item("p1", farm_id="F1")], status="pending", date=NOW - timedelta(days=3),
                email="sam@shop.test", user_id="u1"),
          order("FA-2", [item("p2")], status="delivered", date=NOW - timedelta(days=1),
                email="kim@shop.test", user_id="u2"),
          order("FA-3", [item("p1", farm_id="F1")], status="shipped", date=NOW - timedelta(days=2),
                email="sam@shop.test", user_id="u1"))


@pytest.mark.parametrize("current, new, allowed", [
    ("pending", "confirmed", True),
    ("pending", "shipped", True),
    ("shipped", "processing", False),
    ("processing", "cancelled", True),
    ("delivered", "cancelled", False),
    ("cancelled", "pending", False),
])
def test_transitions(current, new, allowed):
    assert can_transition(OrderStatus(current), OrderStatus(new)) is allowed


def test_list_orders_newest_first_with_filters(orders):
    assert [o.id for o in OrderService.list_orders()] == ["FA-2", "FA-3", "FA-1"]
    assert [o.id for o in OrderService.list_orders(status="pending")] == ["FA-1"]
    assert [o.id for o in OrderService.list_orders(search="kim@")] == ["FA-2"]


def test_orders_for_user(orders):
    sam = Identity(is_logged_in=True, user_id="u1", role="customer", email="sam@shop.test")
    assert [o.id for o in OrderService.orders_for_user(sam)] == ["FA-3", "FA-1"]
    assert [o.id for o in OrderService.orders_for_user(sam, search="fa-1")] == ["FA-1"]
    assert OrderService.orders_for_user(Identity.guest()) == []


def test_track_order_needs_matching_email(orders):
    assert OrderService.track_order("FA-2", "KIM@shop.test").id == "FA-2"
    assert OrderService.track_order("FA-2", "sam@shop.test") is None
    assert OrderService.track_order("FA-404", "kim@shop.test") is None


def test_farm_orders(orders):
    assert [o.id for o in OrderService.farm_orders(farm("F1"), set())] == ["FA-3", "FA-1"]


def test_update_status(orders, db):
    assert OrderService.update_status("FA-1", "processing")["order"]["status"] == "processing"
    assert OrderService.update_status("FA-1", "confirmed")["error"] == "validation"
    assert OrderService.update_status("FA-1", "teleported")["error"] == "validation"
    assert OrderService.update_status("FA-404", "shipped")["error"] == "not_found"
    assert db.orders.find_one({"id": "FA-1"})["status"] == "processing"


def test_cancel_order_only_by_its_customer_or_admin(orders):
    kim = Identity(is_logged_in=True, user_id="u2", role="customer", email="kim@shop.test")
    sam = Identity(is_logged_in=True, user_id="u1", role="customer", email="sam@shop.test")
    admin = Identity(is_logged_in=True, user_id="a1", role="admin")

    assert OrderService.cancel_order("FA-1", kim)["error"] == "not_found"
    assert OrderService.cancel_order("FA-2", kim)["error"] == "validation"
    assert OrderService.cancel_order("FA-1", sam)["order"]["status"] == "cancelled"
    assert OrderService.cancel_order("FA-3", admin)["order"]["status"] == "cancelled"
