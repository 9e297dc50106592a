# Overview: Flask API routes for stores operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response, query_flag, require_business
from shopledger.services import counter_service, store_service


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.get("")
@require_business
def list_stores():
    stores = store_service.list_stores(g.business_id, active_only=query_flag("active_only"))
    return jsonify([store.to_dict() for store in stores]), 200


@stores_bp.post("")
@require_business
def create_store():
    try:
        store = store_service.create_store(g.business_id, request.get_json(silent=True))
        return jsonify(store.to_dict()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create store")
        return jsonify({"error": "Failed to create store"}), 500


@stores_bp.get("/<int:store_id>")
@require_business
def get_store(store_id: int):
    try:
        store = store_service.get_store(g.business_id, store_id)
        return jsonify(store.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@stores_bp.patch("/<int:store_id>")
@require_business
def update_store(store_id: int):
    try:
        store = store_service.update_store(g.business_id, store_id, request.get_json(silent=True))
        return jsonify(store.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update store %s", store_id)
        return jsonify({"error": "Failed to update store"}), 500


@stores_bp.delete("/<int:store_id>")
@require_business
def delete_store(store_id: int):
    try:
        store_service.delete_store(g.business_id, store_id)
        return "", 204
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete store %s", store_id)
        return jsonify({"error": "Failed to delete store"}), 500


@stores_bp.post("/<int:store_id>/generate-customer-number")
@require_business
def generate_customer_number(store_id: int):
    try:
        store = store_service.get_store(g.business_id, store_id)
        return jsonify(counter_service.generate_customer_number(store)), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to generate customer number for store %s", store_id)
        return jsonify({"error": "Failed to generate customer number"}), 500
