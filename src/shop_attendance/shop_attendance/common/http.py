from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum

from flask import jsonify

from ..core.exceptions import (
    ConsentDeniedError,
    ConsentRequiredError,
    DomainError,
    ExternalServiceFailure,
    IncorrectPinError,
    LockedOutError,
    NotFoundError,
    PolicyViolation,
    RaceConditionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

# Most specific first
_STATUS_BY_ERROR = (
    (ConsentRequiredError, 409),
    (ConsentDeniedError, 403),
    (PolicyViolation, 403),
    (LockedOutError, 423),
    (IncorrectPinError, 403),
    (NotFoundError, 404),
    (RaceConditionError, 409),
    (ExternalServiceFailure, 503),
    (ValidationError, 400),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: DomainError):
    body: dict = {"success": False, "message": str(error)}
    if isinstance(error, ConsentRequiredError):
        body["consent_required"] = True
        body["employee_id"] = error.employee_id
    elif isinstance(error, PolicyViolation):
        body["radius_meters"] = round(error.radius_meters)
        body["distance_meters"] = round(error.distance_meters)
    elif isinstance(error, IncorrectPinError):
        body["remaining_attempts"] = error.remaining_attempts
    elif isinstance(error, LockedOutError):
        body["minutes_remaining"] = error.minutes_remaining
    return jsonify(body), status_for(error)


def unexpected_error_response(context: str):
    logger.exception("Unexpected error while %s", context)
    return jsonify({"success": False, "message": GENERIC_ERROR_MESSAGE}), 500


def to_json(value):
    """Dataclass-friendly conversion of domain values for ``jsonify``."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (frozenset, set)):
        return sorted(to_json(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if hasattr(value, "__dataclass_fields__"):
        return {name: to_json(getattr(value, name)) for name in value.__dataclass_fields__}
    return value
