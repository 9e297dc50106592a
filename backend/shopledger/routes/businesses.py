# Overview: Flask API routes for businesses (tenant roots); parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response
from shopledger.services import business_service


businesses_bp = Blueprint("businesses", __name__, url_prefix="/api/businesses")


@businesses_bp.get("")
def list_businesses():
    businesses = business_service.list_businesses()
    return jsonify([b.to_dict() for b in businesses]), 200


@businesses_bp.post("")
def create_business():
    try:
        business = business_service.create_business(request.get_json(silent=True))
        return jsonify(business.to_dict()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create business")
        return jsonify({"error": "Failed to create business"}), 500


@businesses_bp.get("/<int:business_id>")
def get_business(business_id: int):
    try:
        return jsonify(business_service.get_business(business_id).to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@businesses_bp.patch("/<int:business_id>")
def update_business(business_id: int):
    try:
        business = business_service.update_business(business_id, request.get_json(silent=True))
        return jsonify(business.to_dict()), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update business %s", business_id)
        return jsonify({"error": "Failed to update business"}), 500
