# Overview: Request decorators and error helpers for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import tenant_service
from .validation import (
    BusyError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)


# Errors a route turns into a client response; anything else is a 500
DOMAIN_ERRORS = (ValidationError, ConflictError, NotFoundError, InsufficientStockError)


def error_response(exc: Exception):
    """Map a domain error to its JSON body and HTTP status."""
    body = {"error": str(exc)}

    if isinstance(exc, ValidationError):
        if exc.field:
            body["field"] = exc.field
        return jsonify(body), 400
    if isinstance(exc, InsufficientStockError):
        body["details"] = exc.details
        return jsonify(body), 400
    if isinstance(exc, NotFoundError):
        return jsonify(body), 404
    if isinstance(exc, BusyError):
        body["retryable"] = True
        return jsonify(body), 409
    if isinstance(exc, ConflictError):
        if exc.fields:
            body["fields"] = list(exc.fields)
        body["retryable"] = False
        return jsonify(body), 409
    raise exc


def require_business(f):
    """
    Establish tenant context from the X-Business-Id header.

    Sets g.business_id. Returns 400 when the header is missing or malformed
    and 404 when the business does not exist.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = (request.headers.get("X-Business-Id") or "").strip()
        if not raw:
            return jsonify({"error": "X-Business-Id header is required"}), 400
        if not raw.isdigit():
            return jsonify({"error": "X-Business-Id must be an integer"}), 400

        try:
            business = tenant_service.require_business(int(raw))
        except NotFoundError as exc:
            return error_response(exc)

        g.business_id = business.id
        return f(*args, **kwargs)

    return decorated_function


def parse_store_id(value) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("store_id must be an integer", field="store_id")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text.isdigit():
        raise ValidationError("store_id must be an integer", field="store_id")
    return int(text)


def scoped_store(value):
    """Resolve a client-supplied store_id inside the current business."""
    return tenant_service.require_store_in_business(parse_store_id(value), g.business_id)


def query_flag(name: str, default: bool = False) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def request_store():
    """
    Store named by the request: ?store_id= first, then the JSON body.
    """
    value = request.args.get("store_id")
    if value is None:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            value = body.get("store_id")
    return scoped_store(value)


def json_body_without_store() -> dict:
    """JSON object body with the routing-only store_id key removed."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON payload")
    return {k: v for k, v in body.items() if k != "store_id"}
