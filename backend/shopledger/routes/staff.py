# Overview: Flask API routes for staff operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify

from shopledger.decorators import (
    DOMAIN_ERRORS,
    error_response,
    json_body_without_store,
    query_flag,
    request_store,
    require_business,
)
from shopledger.routes.imports import run_bulk_import
from shopledger.services import staff_service


staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("")
@require_business
def list_staff():
    try:
        store = request_store()
        staff = staff_service.list_staff(store.id, include_archived=query_flag("include_archived"))
        return jsonify([s.to_dict() for s in staff]), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@staff_bp.post("")
@require_business
def create_staff():
    try:
        store = request_store()
        staff = staff_service.create_staff(store.id, json_body_without_store())
        return jsonify(staff.to_dict()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create staff member")
        return jsonify({"error": "Failed to create staff member"}), 500


@staff_bp.post("/bulk")
@require_business
def bulk_import_staff():
    return run_bulk_import("staff")


@staff_bp.get("/<int:staff_id>")
@require_business
def get_staff(staff_id: int):
    try:
        store = request_store()
        return jsonify(staff_service.get_staff(store.id, staff_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@staff_bp.patch("/<int:staff_id>")
@require_business
def update_staff(staff_id: int):
    try:
        store = request_store()
        staff = staff_service.update_staff(store.id, staff_id, json_body_without_store())
        return jsonify(staff.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update staff member %s", staff_id)
        return jsonify({"error": "Failed to update staff member"}), 500


@staff_bp.delete("/<int:staff_id>")
@require_business
def archive_staff(staff_id: int):
    try:
        store = request_store()
        return jsonify(staff_service.archive_staff(store.id, staff_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to archive staff member %s", staff_id)
        return jsonify({"error": "Failed to archive staff member"}), 500


@staff_bp.post("/<int:staff_id>/restore")
@require_business
def restore_staff(staff_id: int):
    try:
        store = request_store()
        return jsonify(staff_service.restore_staff(store.id, staff_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to restore staff member %s", staff_id)
        return jsonify({"error": "Failed to restore staff member"}), 500


@staff_bp.delete("/<int:staff_id>/permanent")
@require_business
def delete_staff(staff_id: int):
    try:
        store = request_store()
        staff_service.delete_staff(store.id, staff_id)
        return "", 204
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete staff member %s", staff_id)
        return jsonify({"error": "Failed to delete staff member"}), 500
