# tests/test_farms.py
from datetime import timedelta

from marketplace.services.farms.farm_service import FarmService

from tests.factories import NOW, farm, item, order, product, store

REGISTRATION = {
    "farmName": "Sunny Side",
    "farmType": "dairy",
    "farmLocation": "East Ridge",
    "firstName": "Jo",
    "lastName": "Park",
    "email": "Jo@Sunny.test",
    "phone": "555-0199",
}


def test_register_farm(db):
    out = FarmService.register_farm(REGISTRATION, now=NOW)
    assert out["ok"]
    saved = out["farm"]
    assert saved["id"].startswith("farm_")
    assert saved["status"] == "active"
    assert saved["owner"]["email"] == "jo@sunny.test"
    assert saved["farm"]["name"] == "Sunny Side"

    again = FarmService.register_farm({**REGISTRATION, "farmName": "Other"}, now=NOW)
    assert again["message"] == "A farm is already registered with this email"


def test_register_requires_fields(db):
    out = FarmService.register_farm({**REGISTRATION, "farmLocation": " "})
    assert out["error"] == "validation"
    assert out["message"].startswith("farmLocation")


def test_list_farms_with_stats(db):
    store(db, "farms", farm("F1"), farm("F2", name="Hill Top", email="hill@top.test"))
    store(db, "products", product("p1", farm_id="F1", status="active"))
    store(db, "owner_products",
          product("p2", farm_id="F1", status="pending", submittedDate=(NOW - timedelta(days=1)).isoformat()))
    store(db, "orders",
          order("FA-1", [item("p1", 100, 1)], status="delivered", date=NOW - timedelta(days=5)),
          order("FA-2", [item("p1", 50, 1)], status="shipped", date=NOW - timedelta(days=3)))

    rows = {r["id"]: r for r in FarmService.list_farms()}

    f1 = rows["F1"]
    assert f1["totalProducts"] == 2
    assert f1["activeProducts"] == 1
    assert f1["totalOrders"] == 2
    assert f1["totalRevenue"] == 100.0
    assert f1["totalCommission"] == 15.0
    assert f1["netEarnings"] == 85.0
    assert f1["lastActivity"] == (NOW - timedelta(days=1)).isoformat()
    assert [o["id"] for o in f1["recentOrders"]] == ["FA-2", "FA-1"]

    assert rows["F2"]["totalOrders"] == 0
    assert rows["F2"]["lastActivity"] is None
    assert [r["id"] for r in FarmService.list_farms(search="hill")] == ["F2"]


def test_update_suspend_activate(db):
    store(db, "farms", farm("F1"))
    out = FarmService.update_farm("F1", {"farmName": " New Name ", "phone": "555-0000"})
    assert out["farm"]["farm"]["name"] == "New Name"
    assert out["farm"]["owner"]["phone"] == "555-0000"
    assert out["farm"]["owner"]["firstName"] == "Ana"

    assert FarmService.suspend_farm("F1")["farm"]["status"] == "suspended"
    assert FarmService.activate_farm("F1")["farm"]["status"] == "active"
    assert FarmService.suspend_farm("nope")["error"] == "not_found"


def test_delete_farm_drops_pending_submissions_but_keeps_orders(db):
    store(db, "farms", farm("F1"))
    store(db, "owner_products", product("p2", farm_id="F1", status="pending"))
    store(db, "orders", order("FA-1", [item("p2", farm_id="F1")]))

    assert FarmService.delete_farm("F1")["ok"]
    assert FarmService.get_farm("F1") is None
    assert db.owner_products.count_documents({}) == 0
    assert db.orders.count_documents({}) == 1
