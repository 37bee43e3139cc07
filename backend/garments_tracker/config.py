# backend/garments_tracker/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/garments_tracker.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///garments_tracker.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Payment provider (Stripe). Never logged or echoed to clients.
    STRIPE_SECRET = os.environ.get("STRIPE_SECRET")
    PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "usd")

    # Frontend origin used to build checkout redirect URLs
    SITE_DOMAIN = os.environ.get("SITE_DOMAIN", "http://localhost:5173")

    # Identity provider (Firebase). Base64-encoded service account JSON,
    # or a path to the JSON file.
    FB_SERVICE_KEY = os.environ.get("FB_SERVICE_KEY")
    FB_SERVICE_KEY_PATH = os.environ.get("FB_SERVICE_KEY_PATH")

    CORS_ALLOWED_ORIGIN = os.environ.get("CORS_ALLOWED_ORIGIN", "http://localhost:5173")

    # Enforced by the reverse proxy; exposed here so deployments share one source.
    RATE_LIMIT_PER_MINUTE = int(os.environ.get("RATE_LIMIT_PER_MINUTE", "100"))

    PRODUCTS_DEFAULT_PAGE_SIZE = int(os.environ.get("PRODUCTS_DEFAULT_PAGE_SIZE", "12"))
    PRODUCTS_MAX_PAGE_SIZE = int(os.environ.get("PRODUCTS_MAX_PAGE_SIZE", "100"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
