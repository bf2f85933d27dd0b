import logging
import uuid

from flask import Flask, g, jsonify, request

from . import cli, db
from .config import Config
from .routes import api_bp
from .store import ConfigStore, MemoryBackend, PostgresBackend

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def build_store(app: Flask) -> ConfigStore:
    backend_name = app.config["CONFIG_BACKEND"]
    if backend_name == "memory":
        backend = MemoryBackend()
    elif backend_name == "postgres":
        backend = PostgresBackend(db.get_db, auto_migrate=app.config["AUTO_MIGRATE"])
    else:
        raise ValueError(f"Unknown CONFIG_BACKEND {backend_name!r}")
    log.info(f"Config store backend: {backend_name}")
    return ConfigStore(
        backend,
        allow_unversioned_writes=app.config["ALLOW_UNVERSIONED_WRITES"],
    )


def create_app(config_overrides: dict | None = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Database lifecycle
    db.init_app(app)
    app.extensions["configstore"] = build_store(app)
    cli.init_app(app)

    @app.before_request
    def set_request_context():
        g.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

    @app.after_request
    def add_request_id_header(response):
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response

    # Blueprints
    app.register_blueprint(api_bp)  # /api/*

    # Error handlers - the API only speaks JSON
    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "bad request"}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        log.exception("Internal server error")
        return jsonify({"error": "internal server error"}), 500

    return app
