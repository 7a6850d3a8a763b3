# backend/electropos/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # json-server style REST store holding every shop collection
    DATA_STORE_URL = os.environ.get(
        "DATA_STORE_URL", #optional alternative location
        "http://localhost:3000", #default local location
    )
    DATA_STORE_TIMEOUT = float(os.environ.get("DATA_STORE_TIMEOUT", "10"))

    # Business knobs
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "5"))
    LOYALTY_POINT_UNIT = int(os.environ.get("LOYALTY_POINT_UNIT", "100"))

    # Seeded on first start when the users collection is empty
    DEFAULT_ADMIN_USERNAME = os.environ.get("DEFAULT_ADMIN_USERNAME", "ADMIN")
    DEFAULT_ADMIN_PASSWORD = os.environ.get("DEFAULT_ADMIN_PASSWORD", "Admin@12345#")
    SEED_DEFAULT_ADMIN = True

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }
