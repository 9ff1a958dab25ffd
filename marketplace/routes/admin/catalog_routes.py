# marketplace/routes/admin/catalog_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.commerce.catalog_service import CatalogService

admin_catalog_bp = Blueprint(
    "admin_catalog_bp",
    __name__,
    url_prefix="/admin/products",
)


@admin_catalog_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


@admin_catalog_bp.get("/")
def products_api():
    products = CatalogService.all_products()
    status = request.args.get("status")
    if status and status != "all":
        products = [p for p in products if p.status.value == status]
    return jsonify(
        ok=True,
        count=len(products),
        products=[p.model_dump(mode="json") for p in products],
        stats=CatalogService.product_stats(),
    ), 200


@admin_catalog_bp.get("/pending")
def pending_api():
    pending = CatalogService.pending_products()
    return jsonify(
        ok=True,
        count=len(pending),
        products=[p.model_dump(mode="json") for p in pending],
    ), 200


@admin_catalog_bp.post("/<product_id>/approve")
def approve_api(product_id: str):
    return respond(CatalogService.approve_product(product_id))


@admin_catalog_bp.post("/<product_id>/reject")
def reject_api(product_id: str):
    reason = (request.get_json(silent=True) or {}).get("reason") or ""
    return respond(CatalogService.reject_product(product_id, reason))


@admin_catalog_bp.post("/<product_id>/status")
def status_api(product_id: str):
    status = (request.get_json(silent=True) or {}).get("status") or ""
    return respond(CatalogService.set_status(product_id, status))


@admin_catalog_bp.post("/bulk-status")
def bulk_status_api():
    data = request.get_json(silent=True) or {}
    return respond(CatalogService.bulk_set_status(data.get("ids") or [], data.get("status") or ""))


@admin_catalog_bp.post("/bulk-delete")
def bulk_delete_api():
    data = request.get_json(silent=True) or {}
    return respond(CatalogService.bulk_delete(data.get("ids") or []))


@admin_catalog_bp.put("/<product_id>")
def update_api(product_id: str):
    return respond(CatalogService.update_product(product_id, request.get_json(silent=True) or {}))


@admin_catalog_bp.delete("/<product_id>")
def delete_api(product_id: str):
    return respond(CatalogService.delete_product(product_id))
