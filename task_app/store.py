"""
Task store contract and its SQLAlchemy implementation.

``TaskController`` depends on the ``TaskStore`` protocol rather than on a
database handle, so it can be exercised against a mocked store (record
found, record absent, operation failed) without a live database.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .models import Task

logger = logging.getLogger(__name__)

FILTERABLE_FIELDS = frozenset({"id", "user_id", "title", "completed", "deadline"})


class TaskRecord(Protocol):
    """A stored task that persists its own changes."""

    def save(self) -> TaskRecord:
        """Persist in-place changes and return the updated record."""
        ...

    def remove(self) -> None:
        """Delete the record from the store."""
        ...


class TaskStore(Protocol):
    """Persistence collaborator used by ``TaskController``."""

    def create(self, fields: Mapping[str, Any]) -> TaskRecord:
        """Persist a new record and return it with its assigned identifier."""
        ...

    def find_by_id(self, task_id: str) -> TaskRecord | None:
        """Return the record with ``task_id``, or ``None`` if absent."""
        ...

    def find(self, filters: Mapping[str, Any]) -> list[TaskRecord]:
        """Return every record whose fields equal the given filter values."""
        ...


class SQLAlchemyTaskStore:
    """
    ``TaskStore`` backed by the Flask-SQLAlchemy ``tasks`` table.

    Reads and record writes (``Task.save`` / ``Task.remove``) share the
    application-scoped ``db.session``, so one rollback covers both.
    """

    def create(self, fields: Mapping[str, Any]) -> Task:
        task = Task(**fields)
        task.save()
        logger.info("Stored task %s for user_id=%s", task.id, task.user_id)
        return task

    def find_by_id(self, task_id: str) -> Task | None:
        try:
            return db.session.get(Task, task_id)
        except SQLAlchemyError:
            db.session.rollback()
            raise

    def find(self, filters: Mapping[str, Any]) -> list[Task]:
        unknown = set(filters) - FILTERABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task filter field(s): {sorted(unknown)}")

        stmt = select(Task)
        for field, value in filters.items():
            stmt = stmt.where(getattr(Task, field) == value)
        # Insertion order.
        stmt = stmt.order_by(Task.created_at.asc())

        try:
            return list(db.session.scalars(stmt).all())
        except SQLAlchemyError:
            db.session.rollback()
            raise
