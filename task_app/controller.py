"""
Task controller: the CRUD contract behind the task API.

Each operation is a stateless load -> branch -> act -> respond flow over an
injected ``TaskStore``.  Instead of mutating a shared response object the
operations return a ``TaskResponse``; a ``status`` of ``None`` means the
caller should use its default success status.

Two failure kinds are handled:
  * an id lookup that yields nothing becomes a fixed 404 payload;
  * any exception raised by the store or a record becomes a 500 payload
    carrying the exception's message.
No exception escapes an operation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .store import TaskStore

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
TASK_DELETED = "Task deleted"

CREATE_FIELDS = ("title", "description", "deadline")
UPDATABLE_FIELDS = ("title", "description", "deadline", "completed")


@dataclass(frozen=True)
class TaskResponse:
    """Payload plus optional HTTP status produced by a controller operation."""

    payload: Any
    status: int | None = None


def _not_found() -> TaskResponse:
    return TaskResponse({"message": TASK_NOT_FOUND}, 404)


def _store_failure(operation: str, exc: Exception) -> TaskResponse:
    logger.error("%s failed: %s", operation, exc)
    return TaskResponse({"message": str(exc)}, 500)


def _owned_by(record: Any, user_id: Any) -> bool:
    return user_id is None or getattr(record, "user_id", None) == user_id


class TaskController:
    """
    Translate task requests into store calls and store outcomes into responses.

    Args:
        store: The persistence collaborator.  Only the ``TaskStore``
            methods and the records' ``save`` / ``remove`` are used.
    """

    def __init__(self, store: TaskStore) -> None:
        self.store = store

    def add_task(self, user_id: Any, body: Mapping[str, Any]) -> TaskResponse:
        """
        Create a task owned by ``user_id`` from ``title``, ``description``
        and ``deadline`` in ``body``.

        Returns:
            201 with the created record, or 500 with the failure message.
        """
        logger.info("AddTask - Creating task for user_id=%s", user_id)
        try:
            fields = {"user_id": user_id}
            fields.update({key: body[key] for key in CREATE_FIELDS if key in body})
            task = self.store.create(fields)
        except Exception as exc:
            return _store_failure("AddTask", exc)
        return TaskResponse(task, 201)

    def get_tasks(self, user_id: Any) -> TaskResponse:
        """Return every task owned by ``user_id`` in store order."""
        logger.info("GetTasks - Fetching tasks for user_id=%s", user_id)
        try:
            tasks = list(self.store.find({"user_id": user_id}))
        except Exception as exc:
            return _store_failure("GetTasks", exc)
        return TaskResponse(tasks)

    def update_task(
        self,
        task_id: str,
        body: Mapping[str, Any],
        *,
        user_id: Any = None,
    ) -> TaskResponse:
        """
        Overwrite the updatable fields present in ``body`` and save.

        Fields missing from ``body`` keep their stored values.  When
        ``user_id`` is given, a task owned by someone else is reported as
        not found.
        """
        logger.info("UpdateTask - Updating task %s", task_id)
        try:
            task = self.store.find_by_id(task_id)
            if task is None or not _owned_by(task, user_id):
                logger.warning("Task %s not found", task_id)
                return _not_found()

            for field in UPDATABLE_FIELDS:
                if field in body:
                    setattr(task, field, body[field])
            updated = task.save()
        except Exception as exc:
            return _store_failure("UpdateTask", exc)
        return TaskResponse(updated)

    def delete_task(self, task_id: str, *, user_id: Any = None) -> TaskResponse:
        """Remove the task, or report it as not found."""
        logger.info("DeleteTask - Deleting task %s", task_id)
        try:
            task = self.store.find_by_id(task_id)
            if task is None or not _owned_by(task, user_id):
                logger.warning("Task %s not found", task_id)
                return _not_found()

            task.remove()
        except Exception as exc:
            return _store_failure("DeleteTask", exc)
        return TaskResponse({"message": TASK_DELETED})
