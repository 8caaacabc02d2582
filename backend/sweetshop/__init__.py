# backend/sweetshop/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before extensions read the config
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services.side_effects import SideEffectDispatcher
    SideEffectDispatcher(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.inventory import inventory_bp
    from .routes.regular_orders import regular_orders_bp
    from .routes.event_orders import event_orders_bp
    from .routes.vendors import vendors_bp
    from .routes.expenses import expenses_bp
    from .routes.staff import staff_bp
    from .routes.accounting import accounting_bp
    from .routes.dashboard import dashboard_bp
    from .routes.documents import documents_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(regular_orders_bp)
    app.register_blueprint(event_orders_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(accounting_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(documents_bp)

    allowed_origins = {o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()}

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
