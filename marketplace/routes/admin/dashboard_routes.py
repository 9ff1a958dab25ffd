# marketplace/routes/admin/dashboard_routes.py

from flask import Blueprint

from marketplace.routes.guards import require_role, respond
from marketplace.services.analytics.dashboard_service import DashboardService

admin_dashboard_bp = Blueprint(
    "admin_dashboard_bp",
    __name__,
    url_prefix="/admin/dashboard",
)


@admin_dashboard_bp.get("/")
def dashboard_api():
    """Platform totals, order stats and per-farm commission; polled by the admin UI."""
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp
    return respond(DashboardService.admin_dashboard())
