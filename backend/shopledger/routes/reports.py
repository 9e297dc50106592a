# Overview: Flask API routes for dashboard and chart reports; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response, request_store, require_business
from shopledger.services import reporting_service
from shopledger.validation import ValidationError


reports_bp = Blueprint("reports", __name__, url_prefix="/api")


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    if not raw.strip().isdigit():
        raise ValidationError(f"{name} must be a positive integer", field=name)
    return int(raw)


@reports_bp.get("/dashboard/stats")
@require_business
def dashboard_stats():
    try:
        store = request_store()
        return jsonify(reporting_service.dashboard_stats(store.id)), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@reports_bp.get("/charts/sales-trends")
@require_business
def sales_trends():
    try:
        store = request_store()
        days = _int_arg("days", 30)
        return jsonify(reporting_service.sales_trends(store.id, days=days)), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@reports_bp.get("/charts/revenue-by-type")
@require_business
def revenue_by_type():
    try:
        store = request_store()
        limit = _int_arg("limit", 10)
        return jsonify(reporting_service.revenue_by_type(store.id, limit=limit)), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
