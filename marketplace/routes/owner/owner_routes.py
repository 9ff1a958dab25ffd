# marketplace/routes/owner/owner_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.analytics.dashboard_service import DashboardService
from marketplace.services.analytics.revenue_service import RevenueService
from marketplace.services.commerce.catalog_service import CatalogService
from marketplace.services.commerce.order_service import OrderService
from marketplace.services.farms.farm_service import FarmService

owner_bp = Blueprint(
    "owner_bp",
    __name__,
    url_prefix="/owner",
)


def _require_farm():
    """
    Returns (ok, response_or_none, farm_or_none).
    An owner's user id is their farm id.
    """
    ok, resp, ident = require_role("owner")
    if not ok:
        return False, resp, None
    farm = FarmService.get_farm(ident.user_id)
    if not farm:
        return False, (jsonify(ok=False, error="not_found", message="Farm not found"), 404), None
    return True, None, farm


# ------------------------------------------------------------
# Registration + profile
# ------------------------------------------------------------
@owner_bp.post("/register")
def register_api():
    return respond(FarmService.register_farm(request.get_json(silent=True) or {}), 201)


@owner_bp.get("/profile")
def profile_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    return jsonify(ok=True, farm=farm.model_dump(mode="json")), 200


@owner_bp.put("/profile")
def profile_update_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    payload = dict(request.get_json(silent=True) or {})
    payload.pop("status", None)  # only admins change farm status
    return respond(FarmService.update_farm(farm.id, payload))


# ------------------------------------------------------------
# Dashboard + analytics
# ------------------------------------------------------------
@owner_bp.get("/dashboard")
def dashboard_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    return respond(DashboardService.owner_dashboard(farm.id))


@owner_bp.get("/analytics")
def analytics_api():
    """Usage: /owner/analytics?period=week|month|quarter|year"""
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    return respond(DashboardService.owner_analytics(farm.id, request.args.get("period")))


# ------------------------------------------------------------
# Products
# ------------------------------------------------------------
@owner_bp.get("/products")
def products_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp

    products = CatalogService.farm_products(farm.id)
    status = request.args.get("status")
    if status and status != "all":
        products = [p for p in products if p.status.value == status]
    return jsonify(
        ok=True,
        count=len(products),
        products=[p.model_dump(mode="json") for p in products],
    ), 200


@owner_bp.post("/products")
def submit_product_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    return respond(CatalogService.submit_product(farm, request.get_json(silent=True) or {}), 201)


@owner_bp.delete("/products/<product_id>")
def delete_product_api(product_id: str):
    ok, resp, farm = _require_farm()
    if not ok:
        return resp
    return respond(CatalogService.delete_owner_product(farm.id, product_id))


# ------------------------------------------------------------
# Orders
# ------------------------------------------------------------
@owner_bp.get("/orders")
def orders_api():
    ok, resp, farm = _require_farm()
    if not ok:
        return resp

    ids = CatalogService.farm_product_ids(farm.id)
    orders = OrderService.farm_orders(farm, ids)
    stats = RevenueService.farm_revenue_stats(orders, farm, ids)

    status = request.args.get("status")
    if status and status != "all":
        orders = [o for o in orders if o.status.value == status]

    out = []
    for order in orders:
        v = RevenueService.farm_order_values(order, farm, ids)
        out.append({
            **order.model_dump(mode="json"),
            "farmValues": {
                "farmSubtotal": round(v.farm_subtotal, 2),
                "commission": round(v.commission, 2),
                "netEarnings": round(v.net_earnings, 2),
                "items": v.items,
            },
        })

    return jsonify(ok=True, count=len(out), orders=out, stats=stats.to_dict()), 200
