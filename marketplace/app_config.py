# marketplace/app_config.py

import os
from datetime import timedelta


def load_config(app):
    """
    Load all Flask configuration in a clean centralized way.
    """
    # ------------------------------
    # Mongo
    # ------------------------------
    app.config["MONGO_URI"] = os.getenv(
        "MONGO_URI",
        "mongodb://localhost:27017/farm_marketplace_db"
    )

    # ------------------------------
    # Security Keys
    # ------------------------------
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", os.urandom(24))
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "change-me")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=6)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_TYPE"] = "Bearer"

    # ------------------------------
    # Dashboards
    # ------------------------------
    # Clients re-poll dashboards after this many seconds
    app.config["DASHBOARD_REFRESH_SECONDS"] = int(
        os.getenv("DASHBOARD_REFRESH_SECONDS", "30")
    )

    print("✓ Config Loaded Successfully")
