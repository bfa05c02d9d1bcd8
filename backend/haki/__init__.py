# backend/haki/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, MAILER_EXTENSION_KEY


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from .services.mail_service import build_mailer
    app.extensions[MAILER_EXTENSION_KEY] = build_mailer(app.config)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.brands import brands_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.cart import cart_bp
    from .routes.addresses import addresses_bp
    from .routes.orders import orders_bp
    from .routes.order_management import order_management_bp
    from .routes.revenue import revenue_bp
    from .routes.staff_approval import staff_approval_bp
    from .routes.permissions import permissions_bp
    from .routes.profile import profile_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(brands_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(addresses_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(order_management_bp)
    app.register_blueprint(revenue_bp)
    app.register_blueprint(staff_approval_bp)
    app.register_blueprint(permissions_bp)
    app.register_blueprint(profile_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
