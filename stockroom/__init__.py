import uuid

from flask import Flask, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from config import Config
from . import models  # ensure models are registered with SQLAlchemy
from .cli import register_cli
from .extensions import db
from .routes import errors, inventory, reports
from .seed import demo_dataset
from .services.inventory_store import InventoryStore
from .services.storage import DatabaseStorage, MemoryStorage
from .utils.logging import configure_logging


def _build_storage(app: Flask):
    backend = (app.config.get("STORAGE_BACKEND") or "database").lower()
    if backend == "memory":
        return MemoryStorage()
    if backend != "database":
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")

    try:
        db.create_all()
    except SQLAlchemyError:
        app.logger.exception(
            "Database initialization error; inventory will be kept in memory only"
        )
        db.session.remove()
        return MemoryStorage()
    return DatabaseStorage()


def create_app(config_override=None):
    app = Flask(__name__)

    # load configuration from environment variables
    app.config.from_object(Config)
    if config_override:
        app.config.update(config_override)

    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if database_uri.startswith("sqlite:///:memory:"):
        engine_options = app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {})
        connect_args = engine_options.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine_options.setdefault("poolclass", StaticPool)

    db.init_app(app)
    configure_logging(app)

    with app.app_context():
        storage = _build_storage(app)
        seed = demo_dataset() if app.config.get("SEED_DEMO_DATA") else None
        store = InventoryStore(storage, seed=seed)
        store.load()

    app.extensions["inventory_store"] = store
    app.logger.info(
        "Inventory store ready: %s items, %s transactions, %s suppliers",
        len(store.items),
        len(store.transactions),
        len(store.suppliers),
    )

    @app.before_request
    def _assign_request_id():
        g.request_id = uuid.uuid4().hex[:12]

    app.register_blueprint(errors.bp)
    app.register_blueprint(inventory.bp)
    app.register_blueprint(reports.bp)
    register_cli(app)

    @app.route("/")
    def home():
        return jsonify(
            {
                "name": "stockroom",
                "items": len(store.items),
                "storage_available": store.storage_available,
            }
        )

    return app
