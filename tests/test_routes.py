# tests/test_routes.py
from marketplace.models.promo_models import PromoCode

from tests.factories import farm, item, order, product, store

CHECKOUT = {
    "paymentMethod": "cash",
    "deliveryOption": "express",
    "deliveryLocation": {
        "firstName": "Sam",
        "lastName": "Buyer",
        "email": "sam@shop.test",
        "phone": "555-0101",
        "address": "1 Farm Rd",
        "city": "Springfield",
    },
}


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.get_json()["ok"] is True


def test_guest_cart_carries_over_to_checkout_after_login(client, db, login):
    store(db, "products", product("p1", farm_id="F1", price=10))

    assert client.post("/shop/cart/items", json={"productId": "p1", "quantity": 2}).status_code == 200
    cart = client.get("/shop/cart").get_json()["cart"]
    assert cart["totalItems"] == 2

    res = client.post("/shop/checkout", json=CHECKOUT)
    assert res.status_code == 401

    login("customer", "u1", email="sam@shop.test", first_name="Sam", last_name="Buyer")
    res = client.post("/shop/checkout", json=CHECKOUT)
    assert res.status_code == 201
    placed = res.get_json()["order"]
    assert [(i["id"], i["quantity"]) for i in placed["items"]] == [("p1", 2)]
    assert placed["totals"]["delivery"] == 12.0
    assert client.get("/shop/cart").get_json()["cart"]["totalItems"] == 0

    mine = client.get("/shop/orders").get_json()
    assert [o["id"] for o in mine["orders"]] == [placed["id"]]

    tracked = client.get(f"/shop/track?orderId={placed['id']}&email=sam@shop.test")
    assert tracked.status_code == 200
    assert client.get(f"/shop/track?orderId={placed['id']}&email=x@y.test").status_code == 404


def test_guest_cart_shows_up_after_login(client, db, login):
    store(db, "products", product("p1", price=10), product("p2", price=4))
    client.post("/shop/cart/items", json={"productId": "p1", "quantity": 2})
    login("customer", "u1")
    client.post("/shop/cart/items", json={"productId": "p2"})

    cart = client.get("/shop/cart").get_json()["cart"]
    assert cart["totalItems"] == 3
    assert cart["subtotal"] == 24.0
    assert db.carts.count_documents({}) == 1


def test_promo_quote_endpoint(client, db):
    db.promo_codes.insert_one(PromoCode(id="promo_1", code="SAVE5", type="fixed", value=5).model_dump(mode="json"))
    res = client.post("/shop/promo/quote", json={"code": "save5", "subtotal": 3})
    promo = res.get_json()["promo"]
    assert promo["valid"] and promo["discount"] == 3.0


def test_role_gates(client, login):
    assert client.get("/admin/dashboard/").status_code == 401
    login("customer", "u1")
    assert client.get("/admin/dashboard/").status_code == 403
    assert client.get("/admin/orders/").status_code == 403
    assert client.get("/owner/dashboard").status_code == 403


def test_jwt_identity(app, client):
    from flask_jwt_extended import create_access_token

    token = create_access_token(identity="a1", additional_claims={"role": "admin"})
    res = client.get("/admin/dashboard/", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.get_json()["refreshAfter"] == 15


def test_owner_flow(client, db, login):
    store(db, "farms", farm("F1"))
    login("owner", "F1")

    res = client.post("/owner/products", json={
        "name": "Goat Cheese", "description": "Aged", "category": "dairy",
        "price": 7.5, "stock": 12, "images": ["cheese.jpg"],
    })
    assert res.status_code == 201
    pid = res.get_json()["product"]["id"]

    products = client.get("/owner/products?status=pending").get_json()["products"]
    assert [p["id"] for p in products] == [pid]

    assert client.post("/owner/products", json={"name": "x"}).status_code == 400
    assert client.get("/owner/analytics?period=year").status_code == 200


def test_owner_orders_show_farm_share(client, db, login):
    store(db, "farms", farm("F1"))
    store(db, "orders", order("FA-1", [item("p1", 10, 2, farm_id="F1"), item("p9", 99, 1)]))
    login("owner", "F1")

    body = client.get("/owner/orders").get_json()
    assert body["orders"][0]["farmValues"]["farmSubtotal"] == 20.0
    assert body["stats"]["totalCommission"] == 3.0


def test_admin_moderation_flow(client, db, login):
    store(db, "owner_products", product("p1", farm_id="F1", status="pending"))
    store(db, "orders", order("FA-1", [item("p1")], status="pending"))
    login("admin", "a1")

    assert client.post("/admin/products/p1/reject", json={}).status_code == 400
    assert client.post("/admin/products/p1/approve").status_code == 200
    assert client.post("/admin/products/p1/approve").status_code == 404

    assert client.post("/admin/orders/FA-1/status", json={"status": "shipped"}).status_code == 200
    assert client.post("/admin/orders/FA-1/status", json={"status": "pending"}).status_code == 400

    res = client.post("/admin/promos/", json={"code": "WELCOME", "type": "percentage", "value": 10})
    assert res.status_code == 201
    assert client.get("/admin/promos/?status=active").get_json()["count"] == 1


def test_blog_endpoints(client, login):
    login("admin", "a1")
    post = client.post("/admin/blog/posts", json={"title": "Hello", "content": "Body", "author": "Admin"})
    assert post.status_code == 201
    pid = post.get_json()["post"]["id"]

    res = client.post(f"/blog/posts/{pid}/comments", json={"name": "Kim", "email": "kim@x.test", "text": "Nice"})
    assert res.status_code == 201

    detail = client.get(f"/blog/posts/{pid}").get_json()
    assert [c["text"] for c in detail["comments"]] == ["Nice"]

    assert client.post(f"/blog/posts/{pid}/views").get_json()["counted"] is True
    assert client.post(f"/blog/posts/{pid}/views").get_json()["counted"] is False
    assert client.get("/blog/posts/nope").status_code == 404


def test_storage_outage_maps_to_503(client, login):
    from marketplace.mongo import mongo

    mongo.db = None
    login("admin", "a1")
    res = client.post("/admin/promos/", json={"code": "WELCOME", "type": "percentage", "value": 10})
    assert res.status_code == 503


def test_admin_product_edit_and_bulk_delete(client, db, login):
    store(db, "products",
          product("p1", price=4, description="Crisp", images=["a.jpg"]),
          product("p2"))
    login("admin", "a1")

    res = client.put("/admin/products/p1", json={"price": 6, "stock": 25})
    assert res.status_code == 200
    assert res.get_json()["product"]["stock"] == 25
    assert client.put("/admin/products/p1", json={"images": []}).status_code == 400

    res = client.post("/admin/products/bulk-delete", json={"ids": ["p1", "p2"]})
    assert res.get_json()["deleted"] == 2
    assert client.post("/admin/products/bulk-delete", json={}).status_code == 400


def test_contact_inbox(client, login):
    res = client.post("/contact", json={
        "name": "Kim", "email": "kim@x.test", "subject": "Hi", "message": "Hello there",
    })
    assert res.status_code == 201
    mid = res.get_json()["contact"]["id"]
    assert client.post("/contact", json={"name": "Kim"}).status_code == 400

    assert client.get("/admin/messages/").status_code == 401
    login("admin", "a1")

    inbox = client.get("/admin/messages/?status=unread").get_json()
    assert inbox["count"] == 1 and inbox["stats"]["unread"] == 1

    assert client.get(f"/admin/messages/{mid}").get_json()["contact"]["read"] is True
    assert client.get("/admin/messages/?status=unread").get_json()["count"] == 0
    assert client.post("/admin/messages/mark-all-read").get_json()["updated"] == 0
    assert client.delete(f"/admin/messages/{mid}").status_code == 200
    assert client.get(f"/admin/messages/{mid}").status_code == 404
