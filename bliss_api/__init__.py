from flask import Flask

from .config import Config, HubtelSettings
from .extensions import db, jwt, cors, migrate


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    config_class.init_app(app)

    if not app.config.get("TESTING"):
        from .logging_config import configure_logging
        configure_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_DIR"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    from .services.hubtel import HubtelClient
    app.extensions["hubtel"] = HubtelClient(HubtelSettings.from_config(app.config))

    from .errors import register_error_handlers
    register_error_handlers(app)
    from .cli import register_cli
    register_cli(app)

    # Register blueprints
    from .catalog import bp as catalog_bp; app.register_blueprint(catalog_bp)
    from .orders import bp as orders_bp; app.register_blueprint(orders_bp)
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp)

    @app.get("/")
    def health():
        from .utils.api import ok
        return ok("API running", {"ok": True})

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()
        app.logger.debug("URL map: %s", sorted(r.rule for r in app.url_map.iter_rules()))

    return app
