# backend/garments_tracker/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, IDENTITY_VERIFIER_KEY, PAYMENT_GATEWAY_KEY


def create_app(config_object=Config, *, identity_verifier=None, payment_gateway=None) -> Flask:
    """
    Application factory.

    identity_verifier / payment_gateway override the provider-backed
    collaborators built from config (tests pass in-memory fakes).
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # External collaborators
    from .integrations.identity import FirebaseIdentityVerifier
    from .integrations.payments import StripePaymentGateway

    if identity_verifier is None:
        identity_verifier = FirebaseIdentityVerifier.from_config(app.config)
    if payment_gateway is None:
        payment_gateway = StripePaymentGateway.from_config(app.config)

    if identity_verifier is None:
        app.logger.warning("Identity provider not configured; bearer-protected routes will fail")
    if payment_gateway is None:
        app.logger.warning("Payment provider not configured; checkout routes will fail")

    app.extensions[IDENTITY_VERIFIER_KEY] = identity_verifier
    app.extensions[PAYMENT_GATEWAY_KEY] = payment_gateway

    # Register blueprints
    from .routes.system import system_bp
    from .routes.users import users_bp
    from .routes.products import products_bp
    from .routes.orders import orders_bp
    from .routes.payments import payments_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(payments_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin == app.config.get("CORS_ALLOWED_ORIGIN"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
