"""
Shared pytest fixtures for task-service tests.

Provides the Flask application, test client, database session, RS256
signing keys and token factory, Faker-backed task factories, and mocked
task stores used by the unit and integration suites.

Key Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures
- Factory fixtures (make_token, task_factory, record_factory) for flexible
  test data
- Store doubles built with ``MagicMock(spec=...)`` so the controller can be
  tested without a database
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, NamedTuple
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from faker import Faker

from task_app import create_app, db
from task_app.controller import TaskController
from task_app.models import Task
from task_app.store import TaskStore

fake = Faker()


class KeyPair(NamedTuple):
    private_pem: str
    public_pem: str


def _rsa_key_pair() -> KeyPair:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return KeyPair(private_pem, public_pem)


# -----------------------------------------------------------------------------
# Signing Keys and Tokens
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def jwt_keys() -> KeyPair:
    """The key pair whose public half the test app trusts."""
    return _rsa_key_pair()


@pytest.fixture(scope="session")
def foreign_jwt_keys() -> KeyPair:
    """A key pair the test app does not trust."""
    return _rsa_key_pair()


@pytest.fixture(scope="session")
def make_token(jwt_keys):
    """
    Factory fixture for caller tokens.

    ``_make_token(user_id=..., username=...)`` signs a claim set valid for
    ``expires_in``.  ``issued_ago`` back-dates ``iat``, ``without`` drops
    claims, and ``private_key`` / ``algorithm`` change the signature.
    """

    def _make_token(
        *,
        user_id: Any = 1,
        username: Any = "user_one",
        expires_in: timedelta = timedelta(hours=1),
        issued_ago: timedelta = timedelta(0),
        without: tuple[str, ...] = (),
        private_key: str | None = None,
        algorithm: str = "RS256",
    ) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "user_id": user_id,
            "username": username,
            "iat": int((now - issued_ago).timestamp()),
            "exp": int((now + expires_in).timestamp()),
        }
        for name in without:
            claims.pop(name)
        return jwt.encode(claims, private_key or jwt_keys.private_pem, algorithm=algorithm)

    return _make_token


def _bearer_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app(jwt_keys):
    """Create the Flask app once for the whole session using 'testing' config."""
    application = create_app("testing", JWT_PUBLIC_KEY=jwt_keys.public_pem)
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a fresh Flask test client per test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test function.

    Creates all tables before the test, then rolls back and drops them so
    the next test starts from an empty store.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def api_headers(make_token) -> dict[str, str]:
    """Authorization + JSON headers for user_id=1."""
    return _bearer_headers(make_token(user_id=1, username="user_one"))


@pytest.fixture
def second_user_headers(make_token) -> dict[str, str]:
    """Authorization + JSON headers for user_id=2, for ownership checks."""
    return _bearer_headers(make_token(user_id=2, username="user_two"))


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture that stores Task rows in the test database.

    Returns ``_create_task(**kwargs)`` which fills unspecified fields with
    Faker data and saves the record.
    """

    def _create_task(
        *,
        user_id: int = 1,
        title: str | None = None,
        description: str | None = None,
        deadline: date | None = None,
        completed: bool = False,
    ) -> Task:
        task = Task(
            user_id=user_id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
            deadline=deadline,
            completed=completed,
        )
        return task.save()

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """A single task owned by user_id=1 with predictable values."""
    return task_factory(
        user_id=1,
        title="Old Task",
        description="Old Description",
        deadline=date.today() + timedelta(days=7),
    )


@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """A complete AddTask body."""
    return {
        "title": "New Task",
        "description": "Task description",
        "deadline": "2025-12-31",
    }


# -----------------------------------------------------------------------------
# Store Doubles
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_store() -> MagicMock:
    """A ``TaskStore`` double; configure return values or side effects per test."""
    return MagicMock(spec=TaskStore)


@pytest.fixture
def controller(mock_store) -> TaskController:
    """A controller wired to ``mock_store``."""
    return TaskController(mock_store)


@pytest.fixture
def record_factory():
    """
    Factory for stored-record doubles.

    Each record carries the given fields as attributes; ``save()`` returns
    the record itself and ``remove()`` returns ``None``.
    """

    def _make_record(**fields: Any) -> MagicMock:
        record = MagicMock(spec=["id", "user_id", *fields, "save", "remove"])
        record.id = fields.pop("id", uuid.uuid4().hex)
        for name, value in fields.items():
            setattr(record, name, value)
        record.save.return_value = record
        record.remove.return_value = None
        return record

    return _make_record
