# marketplace/routes/shop/shop_routes.py

import uuid

from flask import Blueprint, current_app, jsonify, request, session

from marketplace.identity import get_identity
from marketplace.routes.guards import respond
from marketplace.services.commerce.cart_service import CartService
from marketplace.services.commerce.catalog_service import CatalogService
from marketplace.services.commerce.checkout_service import CheckoutService
from marketplace.services.commerce.order_service import OrderService
from marketplace.services.commerce.promo_service import PromoService

shop_bp = Blueprint(
    "shop_bp",
    __name__,
    url_prefix="/shop",
)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _merge_guest_cart(ident):
    guest_id = session.get("cart_id")
    if not guest_id:
        return
    out = CartService.merge_carts(guest_id, ident.user_id)
    if out["ok"]:
        session.pop("cart_id", None)
    else:
        # session key stays so the next request retries
        current_app.logger.warning("guest cart %s not merged into %s: %s", guest_id, ident.user_id, out["message"])


def _cart_id():
    """Logged-in users keep their cart under their user id; guests get a session cart."""
    ident = get_identity()
    if ident.is_logged_in:
        _merge_guest_cart(ident)
        return ident.user_id
    if not session.get("cart_id"):
        session["cart_id"] = f"guest-{uuid.uuid4().hex}"
    return session["cart_id"]


def _json():
    return request.get_json(silent=True) or {}


# ------------------------------------------------------------
# Catalog
# ------------------------------------------------------------
@shop_bp.get("/products")
def products_api():
    products = CatalogService.active_products()

    category = request.args.get("category")
    if category and category != "all":
        products = [p for p in products if p.category.value == category]

    q = (request.args.get("q") or "").strip().lower()
    if q:
        products = [p for p in products if q in p.name.lower() or q in (p.description or "").lower()]

    return jsonify(
        ok=True,
        count=len(products),
        products=[p.model_dump(mode="json") for p in products],
    ), 200


@shop_bp.get("/products/<product_id>")
def product_detail_api(product_id: str):
    product = CatalogService.get_product(product_id)
    if not product or not product.is_live:
        return jsonify(ok=False, error="not_found", message="Product not found"), 404
    return jsonify(ok=True, product=product.model_dump(mode="json")), 200


# ------------------------------------------------------------
# Cart
# ------------------------------------------------------------
@shop_bp.get("/cart")
def cart_api():
    cart = CartService.get_cart(_cart_id())
    summary = CartService.summary(
        cart,
        delivery_option=request.args.get("deliveryOption") or "standard",
        promo_code=request.args.get("promoCode"),
    )
    return jsonify(ok=True, cart=summary), 200


@shop_bp.post("/cart/items")
def cart_add_api():
    data = _json()
    try:
        quantity = int(data.get("quantity", 1))
    except (TypeError, ValueError):
        return jsonify(ok=False, error="validation", message="Quantity must be a number"), 400
    return respond(CartService.add_item(_cart_id(), data.get("productId") or "", quantity))


@shop_bp.patch("/cart/items/<product_id>")
def cart_update_api(product_id: str):
    try:
        change = int(_json().get("change", 0))
    except (TypeError, ValueError):
        return jsonify(ok=False, error="validation", message="Change must be a number"), 400
    return respond(CartService.update_quantity(_cart_id(), product_id, change))


@shop_bp.delete("/cart/items/<product_id>")
def cart_remove_api(product_id: str):
    return respond(CartService.remove_item(_cart_id(), product_id))


@shop_bp.delete("/cart")
def cart_clear_api():
    return respond(CartService.clear_cart(_cart_id()))


# ------------------------------------------------------------
# Promo + checkout
# ------------------------------------------------------------
@shop_bp.post("/promo/quote")
def promo_quote_api():
    data = _json()
    subtotal = data.get("subtotal")
    if subtotal is None:
        subtotal = CartService.get_cart(_cart_id()).subtotal
    try:
        subtotal = float(subtotal)
    except (TypeError, ValueError):
        return jsonify(ok=False, error="validation", message="Subtotal must be a number"), 400

    result = PromoService.quote(data.get("code") or "", subtotal)
    return jsonify(ok=True, promo=result.model_dump()), 200


@shop_bp.post("/checkout")
def checkout_api():
    ident = get_identity()
    if ident.is_logged_in:
        _merge_guest_cart(ident)
    return respond(CheckoutService.place_order(ident, _json()), 201)


# ------------------------------------------------------------
# Orders
# ------------------------------------------------------------
@shop_bp.get("/orders")
def my_orders_api():
    ident = get_identity()
    if not ident.is_logged_in:
        return jsonify(ok=False, error="auth", message="Please log in to view your orders"), 401

    orders = OrderService.orders_for_user(ident, search=request.args.get("q"))
    return jsonify(
        ok=True,
        count=len(orders),
        orders=[o.model_dump(mode="json") for o in orders],
    ), 200


@shop_bp.post("/orders/<order_id>/cancel")
def cancel_order_api(order_id: str):
    ident = get_identity()
    if not ident.is_logged_in:
        return jsonify(ok=False, error="auth", message="Please log in"), 401
    return respond(OrderService.cancel_order(order_id, ident))


@shop_bp.get("/track")
def track_order_api():
    """Guest tracking: ?orderId=FA-...&email=..."""
    order = OrderService.track_order(request.args.get("orderId") or "", request.args.get("email") or "")
    if not order:
        return jsonify(
            ok=False,
            error="not_found",
            message="Order not found. Please check your order ID and try again.",
        ), 404
    return jsonify(ok=True, order=order.model_dump(mode="json")), 200
