# marketplace/routes/root/root_routes.py

from flask import Blueprint, jsonify

from marketplace.mongo_safe import get_db, is_mongo_enabled

# Root blueprint
root_bp = Blueprint("root", __name__)


# -----------------------------
# HEALTH
# -----------------------------
@root_bp.get("/")
def home():
    return jsonify(
        ok=True,
        service="farm-marketplace",
        mongo=is_mongo_enabled() and get_db() is not None,
    ), 200
