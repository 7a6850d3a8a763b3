# backend/electropos/__init__.py
from flask import Flask, request

from .config import Config
from .data_store import DataStoreError
from .extensions import init_data_store


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    store = init_data_store(app)

    # Register blueprints
    from .routes.products import products_bp
    from .routes.billing import billing_bp
    from .routes.sales import sales_bp
    from .routes.customers import customers_bp
    from .routes.suppliers import suppliers_bp
    from .routes.purchase_orders import purchase_orders_bp
    from .routes.repairs import repairs_bp
    from .routes.accounting import accounting_bp
    from .routes.reports import reports_bp
    from .routes.settings import settings_bp
    from .routes.users import users_bp

    app.register_blueprint(products_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(purchase_orders_bp)
    app.register_blueprint(repairs_bp)
    app.register_blueprint(accounting_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(users_bp)

    @app.before_request
    def mark_caches_stale():
        # Other workers and the dashboard write to the same store
        store.invalidate()

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("SEED_DEFAULT_ADMIN"):
        from .services.user_service import ensure_default_admin
        try:
            ensure_default_admin(
                store,
                app.config["DEFAULT_ADMIN_USERNAME"],
                app.config["DEFAULT_ADMIN_PASSWORD"],
            )
        except DataStoreError as e:
            # The REST store may not be up yet; seeding is retried on next start
            app.logger.warning("Default admin not seeded: %s", e)

    return app
