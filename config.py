"""
Configuration Classes for the Task Service.

``Config`` holds the settings the service actually reads: the task store
URI, log level, and the JWT verification policy used by
``task_app.auth``.  Environment subclasses override only what differs.
The RS256 public key is not a class attribute; ``create_app`` takes it
as an override or resolves it with ``load_jwt_public_key``.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def load_jwt_public_key() -> str:
    """
    Return the PEM public key used to verify caller tokens.

    Read from ``JWT_PUBLIC_KEY`` (the PEM text itself) or, failing that,
    from the file named by ``JWT_PUBLIC_KEY_PATH``.

    Raises:
        RuntimeError: If neither variable yields a key.
    """
    raw_key = os.environ.get("JWT_PUBLIC_KEY", "").strip()
    if raw_key:
        return raw_key

    key_path = os.environ.get("JWT_PUBLIC_KEY_PATH", "").strip()
    if not key_path:
        raise RuntimeError(
            "Missing JWT key configuration: set JWT_PUBLIC_KEY or JWT_PUBLIC_KEY_PATH."
        )
    try:
        return Path(key_path).read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Unable to read JWT public key file at '{key_path}'.") from exc


class Config:
    """
    Base configuration.

    Attributes:
        SQLALCHEMY_DATABASE_URI: Task store connection string (default:
            SQLite file under ``instance/``).
        SQLALCHEMY_ECHO: Log every SQL statement when ``TASKS_SQL_ECHO=1``.
        LOG_LEVEL: Root log level applied by ``create_app``.
        JWT_ALGORITHMS: Signing algorithms accepted on caller tokens.
        JWT_REQUIRED_CLAIMS: Claims a token must carry; ``user_id`` becomes
            the owning-user identifier of every task operation.
        JWT_CLOCK_SKEW_SECONDS: Leeway when checking ``exp`` / ``iat``.
    """

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "task-service-dev-secret")
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = os.environ.get("TASKS_SQL_ECHO") == "1"

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    JWT_ALGORITHMS: list[str] = ["RS256"]
    JWT_REQUIRED_CLAIMS: list[str] = ["user_id", "username", "iat", "exp"]
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))


class DevelopmentConfig(Config):
    DEBUG: bool = True


class TestingConfig(Config):
    """In-memory task store and quieter logs for the test suite."""

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = "sqlite://"
    LOG_LEVEL: str = "WARNING"


class ProductionConfig(Config):
    DEBUG: bool = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """Return the configuration class for ``env`` (default: ``FLASK_ENV``)."""
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
