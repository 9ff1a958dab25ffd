# marketplace/routes/admin/order_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.analytics.revenue_service import RevenueService
from marketplace.services.commerce.order_service import OrderService

admin_orders_bp = Blueprint(
    "admin_orders_bp",
    __name__,
    url_prefix="/admin/orders",
)


@admin_orders_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


@admin_orders_bp.get("/")
def orders_api():
    """Usage: /admin/orders?status=pending&q=FA-17"""
    orders = OrderService.list_orders(
        status=request.args.get("status"),
        search=request.args.get("q"),
    )
    return jsonify(
        ok=True,
        count=len(orders),
        orders=[o.model_dump(mode="json") for o in orders],
        stats=RevenueService.order_stats(OrderService.all_orders()).to_dict(),
    ), 200


@admin_orders_bp.get("/<order_id>")
def order_detail_api(order_id: str):
    order = OrderService.get_order(order_id)
    if not order:
        return jsonify(ok=False, error="not_found", message="Order not found"), 404
    return jsonify(ok=True, order=order.model_dump(mode="json")), 200


@admin_orders_bp.post("/<order_id>/status")
def order_status_api(order_id: str):
    status = (request.get_json(silent=True) or {}).get("status") or ""
    return respond(OrderService.update_status(order_id, status))
