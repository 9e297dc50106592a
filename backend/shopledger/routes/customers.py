# Overview: Flask API routes for customers operations; parses input and returns JSON responses.

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
from shopledger.services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_business
def list_customers():
    try:
        store = request_store()
        customers = customer_service.list_customers(
            store.id, include_archived=query_flag("include_archived")
        )
        return jsonify([c.to_dict() for c in customers]), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@customers_bp.post("")
@require_business
def create_customer():
    try:
        store = request_store()
        customer = customer_service.create_customer(store.id, json_body_without_store())
        return jsonify(customer.to_dict()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Failed to create customer"}), 500


@customers_bp.post("/bulk")
@require_business
def bulk_import_customers():
    return run_bulk_import("customers")


@customers_bp.get("/<int:customer_id>")
@require_business
def get_customer(customer_id: int):
    try:
        store = request_store()
        return jsonify(customer_service.get_customer(store.id, customer_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@customers_bp.patch("/<int:customer_id>")
@require_business
def update_customer(customer_id: int):
    try:
        store = request_store()
        customer = customer_service.update_customer(store.id, customer_id, json_body_without_store())
        return jsonify(customer.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update customer %s", customer_id)
        return jsonify({"error": "Failed to update customer"}), 500


@customers_bp.delete("/<int:customer_id>")
@require_business
def archive_customer(customer_id: int):
    try:
        store = request_store()
        customer = customer_service.archive_customer(store.id, customer_id)
        return jsonify(customer.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to archive customer %s", customer_id)
        return jsonify({"error": "Failed to archive customer"}), 500


@customers_bp.post("/<int:customer_id>/restore")
@require_business
def restore_customer(customer_id: int):
    try:
        store = request_store()
        customer = customer_service.restore_customer(store.id, customer_id)
        return jsonify(customer.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to restore customer %s", customer_id)
        return jsonify({"error": "Failed to restore customer"}), 500


@customers_bp.delete("/<int:customer_id>/permanent")
@require_business
def delete_customer(customer_id: int):
    try:
        store = request_store()
        customer_service.delete_customer(store.id, customer_id)
        return "", 204
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete customer %s", customer_id)
        return jsonify({"error": "Failed to delete customer"}), 500
