"""
Task Service Flask Application Factory.

``create_app`` assembles the service: configuration and logging, the
Flask-SQLAlchemy task store, a ``TaskController`` bound to that store and
the JSON API blueprint under ``/api``.

The controller lives on ``app.extensions["task_controller"]`` so route
handlers reach it through ``current_app`` and tests can swap in one built
around a mocked store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import get_config, load_jwt_public_key

db = SQLAlchemy()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist; the level still has to follow config.
    logging.getLogger().setLevel(level)


def _prepare_sqlite_file(database_uri: str) -> None:
    """Create the directory holding a file-based SQLite task store."""
    prefix = "sqlite:///"
    if not database_uri.startswith(prefix):
        return
    path = database_uri[len(prefix) :].split("?", 1)[0]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None, **overrides: Any) -> Flask:
    """
    Create and configure the task service application.

    Args:
        config_name: Configuration environment (``"development"``,
            ``"testing"``, ``"production"``); *None* reads ``FLASK_ENV``.
        **overrides: Config keys applied after the environment class,
            e.g. ``JWT_PUBLIC_KEY`` or ``SQLALCHEMY_DATABASE_URI``.

    Returns:
        A configured Flask application with its task table created.

    Raises:
        RuntimeError: If no JWT public key is supplied or configured.
    """
    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config.update(overrides)
    if not app.config.get("JWT_PUBLIC_KEY"):
        app.config["JWT_PUBLIC_KEY"] = load_jwt_public_key()

    _configure_logging(app.config["LOG_LEVEL"])
    logger.info("Creating task service app with config: %s", config_class.__name__)

    _prepare_sqlite_file(app.config["SQLALCHEMY_DATABASE_URI"])
    db.init_app(app)

    from .controller import TaskController
    from .routes.api import api_bp
    from .store import SQLAlchemyTaskStore

    app.extensions["task_controller"] = TaskController(SQLAlchemyTaskStore())
    app.register_blueprint(api_bp, url_prefix="/api")

    with app.app_context():
        db.create_all()
        logger.info("Task table ready at %s", db.engine.url.render_as_string(hide_password=True))

    return app
