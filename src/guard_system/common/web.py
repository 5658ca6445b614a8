"""Request-handler plumbing shared by every controller.

Controllers stay thin: read the payload, call a service, shape JSON. The
decorators here own the two cross-cutting concerns of the handler boundary:
who is calling (session identity) and how failures become HTTP answers.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import current_app, jsonify, request, session

from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from .urls import resolve_base_url

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_ORG_KEY = "organization_id"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller and the tenant every query is scoped to."""

    user_id: str
    organization_id: str


def remember_identity(identity: Identity) -> None:
    session.clear()
    session[SESSION_USER_KEY] = identity.user_id
    session[SESSION_ORG_KEY] = identity.organization_id


def forget_identity() -> None:
    session.clear()


def current_identity() -> Identity:
    user_id = session.get(SESSION_USER_KEY)
    organization_id = session.get(SESSION_ORG_KEY)
    if not user_id or not organization_id:
        raise AuthenticationError("Unauthorized - please log in")
    return Identity(user_id=str(user_id), organization_id=str(organization_id))


def to_json(value: Any) -> Any:
    """Turn domain objects into JSON-ready structures (ISO timestamps, enum values)."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def read_json() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def request_base_url() -> str:
    forwarded = request.headers.get("X-Forwarded-Proto") or request.headers.get("X-Forwarded-Protocol")
    return resolve_base_url(current_app.config.get("APP_BASE_URL"), request.host, forwarded)


def error_response(message: str, status: int, **extra: Any):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def json_endpoint(view):
    """Catch everything at the handler boundary and answer with a JSON error."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            extra = e.extra
            return error_response(str(e), e.status_code, **extra)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return error_response("Internal server error", 500)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_identity()
        return view(*args, **kwargs)

    return wrapper
