import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, is_production, deployment_warnings
from .errors import register_error_handlers
from .version import __version__
from models.db_storage import DBStorage
from models.refresh_registry import DatabaseRefreshTokenRegistry, InMemoryRefreshTokenRegistry

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Session Core API",
        "version": __version__,
        "description": "Access token refresh and self-scoped user management.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def _build_registry(app, storage):
    backend = app.config.get("REFRESH_REGISTRY_BACKEND", "memory").lower()
    if backend == "database":
        return DatabaseRefreshTokenRegistry(storage)
    if backend != "memory":
        raise ValueError(f"Unknown REFRESH_REGISTRY_BACKEND: {backend}")
    return InMemoryRefreshTokenRegistry()


def create_app(config_name: str | None = None, registry=None, storage=None, overrides: dict | None = None) -> Flask:
    """
    Application factory.
    The refresh registry and the user store are owned by the app; pass them
    in to share or isolate them (tests create one of each per app).
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    if is_production(app.config):
        # synthetic identities never run in production
        app.config["TEST_IDENTITIES_ENABLED"] = False
        for warning in deployment_warnings(app.config):
            logger.warning("Insecure production setting: %s", warning)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}})

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    if storage is None:
        storage = DBStorage(app.config["DATABASE_URL"])
        storage.reload()
    if registry is None:
        registry = _build_registry(app, storage)
    app.extensions["storage"] = storage
    app.extensions["refresh_registry"] = registry

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Session Core API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    return app
