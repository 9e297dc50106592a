# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from shopledger.decorators import (
    DOMAIN_ERRORS,
    error_response,
    json_body_without_store,
    query_flag,
    request_store,
    require_business,
)
from shopledger.routes.imports import run_bulk_import
from shopledger.services import inventory_service


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_business
def list_inventory():
    try:
        store = request_store()
        items = inventory_service.list_items(
            store.id,
            type=request.args.get("type"),
            low_stock=query_flag("low_stock"),
        )
        return jsonify([item.to_dict() for item in items]), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@inventory_bp.post("")
@require_business
def create_inventory_item():
    try:
        store = request_store()
        item = inventory_service.create_item(store.id, json_body_without_store())
        return jsonify(item.to_dict()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create inventory item")
        return jsonify({"error": "Failed to create inventory item"}), 500


@inventory_bp.post("/bulk")
@require_business
def bulk_import_inventory():
    return run_bulk_import("inventory")


@inventory_bp.get("/<int:item_id>")
@require_business
def get_inventory_item(item_id: int):
    try:
        store = request_store()
        return jsonify(inventory_service.get_item(store.id, item_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@inventory_bp.patch("/<int:item_id>")
@require_business
def update_inventory_item(item_id: int):
    try:
        store = request_store()
        item = inventory_service.update_item(store.id, item_id, json_body_without_store())
        return jsonify(item.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update inventory item %s", item_id)
        return jsonify({"error": "Failed to update inventory item"}), 500


@inventory_bp.delete("/<int:item_id>")
@require_business
def delete_inventory_item(item_id: int):
    try:
        store = request_store()
        inventory_service.delete_item(store.id, item_id)
        return "", 204
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete inventory item %s", item_id)
        return jsonify({"error": "Failed to delete inventory item"}), 500
