"""Business rules applied to incoming location reports."""
from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from location_service.exceptions import LocationValidationError
from location_service.schemas import LocationPayload, LocationReport

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MAX_VEHICLE_ID_LENGTH = 50
MAX_NAME_LENGTH = 200

EMPTY_BODY_MESSAGE = "request body cannot be empty"
INVALID_JSON_MESSAGE = "invalid JSON format"

# lower-cased alias -> alias, for case-insensitive field matching
_FIELD_ALIASES = {
    field.alias.lower(): field.alias
    for field in LocationPayload.model_fields.values()
    if field.alias
}


def _reject_constant(value: str) -> Any:
    raise ValueError(f"unsupported JSON constant {value}")


def _normalize_keys(document: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in document.items():
        alias = _FIELD_ALIASES.get(key.lower())
        if alias is not None:
            normalized[alias] = value
    return normalized


def parse_location_payload(raw: bytes | str) -> LocationPayload:
    """Decode the request body, short-circuiting on body level failures."""

    if isinstance(raw, bytes):
        if not raw.strip():
            raise LocationValidationError([EMPTY_BODY_MESSAGE])
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise LocationValidationError([INVALID_JSON_MESSAGE]) from None
    else:
        text = raw

    if not text or not text.strip():
        raise LocationValidationError([EMPTY_BODY_MESSAGE])

    try:
        document = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        raise LocationValidationError([INVALID_JSON_MESSAGE]) from None

    if not isinstance(document, dict):
        raise LocationValidationError([INVALID_JSON_MESSAGE])

    try:
        return LocationPayload.model_validate(_normalize_keys(document))
    except ValidationError:
        raise LocationValidationError([INVALID_JSON_MESSAGE]) from None


def collect_violations(payload: LocationPayload) -> list[str]:
    errors: list[str] = []

    vehicle_id = payload.vehicle_id
    if vehicle_id is None or not vehicle_id.strip():
        errors.append("camionId is required")
    elif len(vehicle_id) > MAX_VEHICLE_ID_LENGTH:
        errors.append(f"camionId cannot exceed {MAX_VEHICLE_ID_LENGTH} characters")

    if payload.latitude < MIN_LATITUDE or payload.latitude > MAX_LATITUDE:
        errors.append(f"latitud must be between {MIN_LATITUDE} and {MAX_LATITUDE}")

    if payload.longitude < MIN_LONGITUDE or payload.longitude > MAX_LONGITUDE:
        errors.append(f"longitud must be between {MIN_LONGITUDE} and {MAX_LONGITUDE}")

    # (0, 0) is what most receivers emit without a fix
    if payload.latitude == 0 and payload.longitude == 0:
        errors.append("invalid GPS fix: coordinates 0,0 are not valid")

    if payload.name and len(payload.name) > MAX_NAME_LENGTH:
        errors.append(f"nombre cannot exceed {MAX_NAME_LENGTH} characters")

    return errors


def validate_location_body(raw: bytes | str) -> LocationReport:
    """Validate a raw request body and return the normalized report.

    Empty bodies and malformed JSON fail immediately with a single error.
    Field rules are all evaluated and reported together through
    :class:`LocationValidationError`.
    """

    payload = parse_location_payload(raw)

    errors = collect_violations(payload)
    if errors:
        raise LocationValidationError(errors)

    return LocationReport(
        vehicle_id=payload.vehicle_id,
        latitude=payload.latitude,
        longitude=payload.longitude,
        name=payload.name,
    )
