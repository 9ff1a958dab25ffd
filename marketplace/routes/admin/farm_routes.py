# marketplace/routes/admin/farm_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.farms.farm_service import FarmService

admin_farms_bp = Blueprint(
    "admin_farms_bp",
    __name__,
    url_prefix="/admin/farms",
)


@admin_farms_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


@admin_farms_bp.get("/")
def farms_api():
    farms = FarmService.list_farms(
        status=request.args.get("status"),
        search=request.args.get("q"),
    )
    return jsonify(ok=True, count=len(farms), farms=farms), 200


@admin_farms_bp.get("/<farm_id>")
def farm_detail_api(farm_id: str):
    farm = FarmService.get_farm(farm_id)
    if not farm:
        return jsonify(ok=False, error="not_found", message="Farm not found"), 404
    return jsonify(ok=True, farm=farm.model_dump(mode="json")), 200


@admin_farms_bp.put("/<farm_id>")
def farm_update_api(farm_id: str):
    return respond(FarmService.update_farm(farm_id, request.get_json(silent=True) or {}))


@admin_farms_bp.post("/<farm_id>/suspend")
def farm_suspend_api(farm_id: str):
    return respond(FarmService.suspend_farm(farm_id))


@admin_farms_bp.post("/<farm_id>/activate")
def farm_activate_api(farm_id: str):
    return respond(FarmService.activate_farm(farm_id))


@admin_farms_bp.delete("/<farm_id>")
def farm_delete_api(farm_id: str):
    return respond(FarmService.delete_farm(farm_id))
