"""Shared Flask plumbing for the JSON controllers.

Identity comes from the session, which the external auth layer fills with
``user_id``, ``applicant_id``, ``role`` and ``tenant``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidState,
    NotFound,
    OverlapDetected,
    StorageUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    applicant_id: str
    role: Role
    tenant: Optional[str]

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


def current_identity() -> Identity:
    user_id = str(session["user_id"])
    try:
        role = Role(session.get("role", Role.WORKER.value))
    except ValueError:
        raise AuthorizationError(f"Unknown role: {session.get('role')}") from None
    return Identity(
        user_id=user_id,
        applicant_id=str(session.get("applicant_id") or user_id),
        role=role,
        tenant=session.get("tenant"),
    )


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Login required"}), 401
        if session.get("role") != Role.MANAGER.value:
            return jsonify({"success": False, "error": "forbidden", "message": "Manager role required"}), 403
        return view(*args, **kwargs)

    return wrapper


_STATUS_BY_ERROR = (
    (ValidationError, 400, "validation_error"),
    (AuthorizationError, 403, "forbidden"),
    (NotFound, 404, "not_found"),
    (OverlapDetected, 409, "overlap_detected"),
    (InvalidState, 409, "invalid_state"),
    (StorageUnavailable, 503, "storage_unavailable"),
)


def error_payload(error: DomainError):
    for error_type, status, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            break
    else:
        status, code = 400, "domain_error"

    body: Dict[str, Any] = {"success": False, "error": code, "message": str(error), "retryable": error.retryable}
    if isinstance(error, OverlapDetected):
        body["conflicting_ids"] = list(error.conflicting_ids)
    return body, status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        body, status = error_payload(error)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, error)
        else:
            logger.info("%s %s rejected (%s): %s", request.method, request.path, body["error"], error)
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"success": False, "error": error.name.lower().replace(" ", "_"), "message": error.description}), error.code
