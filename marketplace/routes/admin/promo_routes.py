# marketplace/routes/admin/promo_routes.py

from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.commerce.promo_service import PromoService

admin_promos_bp = Blueprint(
    "admin_promos_bp",
    __name__,
    url_prefix="/admin/promos",
)


@admin_promos_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


@admin_promos_bp.get("/")
def promos_api():
    now = datetime.now(timezone.utc)
    promos = [p.to_public(now) for p in PromoService.list_codes()]
    status = request.args.get("status")
    if status and status != "all":
        promos = [p for p in promos if p["status"] == status]
    return jsonify(ok=True, count=len(promos), promos=promos), 200


@admin_promos_bp.post("/")
def promo_create_api():
    return respond(PromoService.create_code(request.get_json(silent=True) or {}), 201)


@admin_promos_bp.put("/<promo_id>")
def promo_update_api(promo_id: str):
    return respond(PromoService.update_code(promo_id, request.get_json(silent=True) or {}))


@admin_promos_bp.post("/<promo_id>/enabled")
def promo_toggle_api(promo_id: str):
    enabled = (request.get_json(silent=True) or {}).get("enabled", True)
    return respond(PromoService.set_enabled(promo_id, bool(enabled)))


@admin_promos_bp.delete("/<promo_id>")
def promo_delete_api(promo_id: str):
    return respond(PromoService.delete_code(promo_id))
