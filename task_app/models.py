"""
Database Model for the Task Service.

Defines the SQLAlchemy ORM model for a user-owned task.  Each task is
scoped to exactly one user via ``user_id``, set when the task is created
and never reassigned.

Records behave like documents: ``save()`` persists in-place changes and
``remove()`` deletes the row, so the controller never touches the session
directly.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from . import db

TITLE_MAX_LENGTH = 200


def _new_task_id() -> str:
    return uuid.uuid4().hex


def parse_deadline(value: date | datetime | str | None) -> date | None:
    """
    Coerce a deadline value into a ``date``.

    Accepts ``date`` and ``datetime`` instances as well as ISO-8601
    strings (``2025-12-31`` or ``2025-12-31T00:00:00Z``).  Empty values
    clear the deadline.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise ValueError(
                f"Invalid deadline '{value}'. Use ISO format (YYYY-MM-DD)"
            ) from exc
    raise ValueError(f"Invalid deadline type: {type(value).__name__}")


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Store-assigned opaque identifier (hex UUID).
        user_id: Owning user, taken from the authenticated JWT.  Indexed
            for per-user queries.
        title: Short summary of the task (max 200 characters).
        description: Optional longer text.
        deadline: Optional due date.
        completed: Whether the task is done (defaults to ``False``).
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC, auto-updated).
    """

    __tablename__ = "tasks"

    id: str = db.Column(db.String(32), primary_key=True, default=_new_task_id)
    user_id: int = db.Column(db.Integer, nullable=False, index=True)
    title: str = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    deadline: date | None = db.Column(db.Date, nullable=True)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def validate(self) -> None:
        """
        Coerce the deadline and check field-level rules before a write.

        Runs inside ``save()``, so a failure here rolls the session back
        and discards every unsaved change on the record, not only the
        offending field.

        Raises:
            ValueError: With a ``Task validation failed: ...`` message when
                the owner is missing, the title is empty or too long, or
                ``completed`` is not a boolean; or from ``parse_deadline``.
        """
        self.deadline = parse_deadline(self.deadline)
        if self.user_id is None:
            raise ValueError("Task validation failed: user_id is required")
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("Task validation failed: title is required")
        if len(self.title) > TITLE_MAX_LENGTH:
            raise ValueError(
                f"Task validation failed: title must be {TITLE_MAX_LENGTH} characters or less"
            )
        if self.completed is not None and not isinstance(self.completed, bool):
            raise ValueError("Task validation failed: completed must be a boolean")

    def save(self) -> Task:
        """Validate and persist this record, returning it."""
        try:
            # Unsaved fields may still hold raw input until validate() coerces them.
            with db.session.no_autoflush:
                self.validate()
            db.session.add(self)
            db.session.commit()
        except (ValueError, SQLAlchemyError):
            db.session.rollback()
            raise
        return self

    def remove(self) -> None:
        """Delete this record from the store."""
        try:
            db.session.delete(self)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    @staticmethod
    def _to_utc_iso(value: datetime | None) -> str | None:
        """
        Convert a datetime to a UTC ISO-8601 string.

        SQLite drops timezone information, so values read back may be
        naive even though they were written in UTC; those are assumed UTC.
        """
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
        return value.isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "completed": bool(self.completed),
            "created_at": self._to_utc_iso(self.created_at),
            "updated_at": self._to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
