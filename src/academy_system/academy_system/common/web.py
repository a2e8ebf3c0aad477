"""Shared helpers for the JSON controllers."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict

from flask import jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: DomainError):
    body: Dict[str, Any] = {"success": False, "error": str(error)}
    if isinstance(error, ConflictError) and error.details is not None:
        body["conflicts"] = error.details
    return jsonify(body), status_for(error)


def server_error(message: str):
    logger.exception(message)
    return jsonify({"success": False, "error": message}), 500


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_tenant() -> str:
    return str(session["tenant_id"])


def current_actor() -> str:
    return str(session.get("name") or session.get("email") or "System")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "email" not in session:
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def tenant_required(view):
    """Reject callers without a tenant bound to their session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("tenant_id"):
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def domain_errors(message: str):
    """Map domain exceptions to JSON errors and anything else to a logged 500."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return error_response(e)
            except Exception:
                return server_error(message)

        return wrapper

    return decorator
