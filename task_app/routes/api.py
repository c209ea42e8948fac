"""
REST API Endpoints for the Task Service.

Thin HTTP adapter over ``TaskController``: handlers pull the caller's
``user_id`` from ``flask.g`` (set by ``require_auth``), pass the JSON body
through and turn the returned ``TaskResponse`` into a Flask response.

Endpoints:
    GET    /api/health            - Service health check (public)
    GET    /api/tasks             - List the caller's tasks
    POST   /api/tasks             - Create a task
    PUT    /api/tasks/<task_id>   - Partially update a task
    DELETE /api/tasks/<task_id>   - Delete a task
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..auth import require_auth
from ..controller import TaskController, TaskResponse

logger = logging.getLogger(__name__)

api_bp = Blueprint("task_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _controller() -> TaskController:
    return current_app.extensions["task_controller"]


def _json_body() -> dict[str, Any]:
    """Return the request's JSON object, or an empty dict if there is none."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def serialise(payload: Any) -> Any:
    """
    Convert a controller payload into JSON-safe data.

    Records are serialised through their ``to_dict()``; lists are handled
    element-wise; everything else is returned unchanged.
    """
    if isinstance(payload, list):
        return [serialise(item) for item in payload]
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    return payload


def to_flask_response(result: TaskResponse) -> Response:
    """Build a JSON response, only overriding the status when one was set."""
    response = jsonify(serialise(result.payload))
    if result.status is not None:
        response.status_code = result.status
    return response


# =====================================================================
# API Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Liveness check for load balancers and orchestrators."""
    return (
        jsonify(
            {
                "status": "healthy",
                "service": "tasks",
                "environment": os.getenv("ENVIRONMENT", "unknown"),
            }
        ),
        200,
    )


@api_bp.route("/tasks", methods=["GET"])
@require_auth
def get_tasks() -> Response:
    """List all tasks owned by the authenticated user."""
    logger.info("GET /api/tasks - user_id=%s", g.user_id)
    return to_flask_response(_controller().get_tasks(g.user_id))


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def add_task() -> Response:
    """Create a task from ``title``, ``description`` and ``deadline``."""
    logger.info("POST /api/tasks - user_id=%s", g.user_id)
    return to_flask_response(_controller().add_task(g.user_id, _json_body()))


@api_bp.route("/tasks/<task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: str) -> Response:
    """Overwrite the fields present in the body of one of the caller's tasks."""
    logger.info("PUT /api/tasks/%s - user_id=%s", task_id, g.user_id)
    result = _controller().update_task(task_id, _json_body(), user_id=g.user_id)
    return to_flask_response(result)


@api_bp.route("/tasks/<task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: str) -> Response:
    """Delete one of the caller's tasks."""
    logger.info("DELETE /api/tasks/%s - user_id=%s", task_id, g.user_id)
    return to_flask_response(_controller().delete_task(task_id, user_id=g.user_id))


# =====================================================================
# Error Handlers
# =====================================================================


@api_bp.errorhandler(400)
def bad_request(_: Exception) -> tuple[Response, int]:
    return jsonify({"message": "Bad request"}), 400


@api_bp.errorhandler(404)
def not_found(_: Exception) -> tuple[Response, int]:
    return jsonify({"message": "Resource not found"}), 404


@api_bp.errorhandler(405)
def method_not_allowed(_: Exception) -> tuple[Response, int]:
    return jsonify({"message": "Method not allowed"}), 405


@api_bp.errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Log the exception and return a JSON 500 Internal Server Error."""
    logger.error("Internal server error: %s", error)
    return jsonify({"message": "Internal server error"}), 500
