# Overview: Flask API routes for sales; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response, require_business, scoped_store
from shopledger.services import sales_service
from shopledger.validation import ValidationError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


def _payment_kwargs(data: dict) -> dict:
    return {
        "payment_method": data.get("payment_method"),
        "payment_status": data.get("payment_status"),
        "payment_reference": data.get("payment_reference"),
    }


@sales_bp.post("")
@require_business
def record_sale():
    """
    Body: {store_id, inventory_id, quantity, staff_id, customer_id,
           payment_method?, payment_status?, payment_reference?}
    """
    try:
        data = _body()
        store = scoped_store(data.get("store_id"))
        transaction = sales_service.record_sale(
            store.id,
            data.get("inventory_id"),
            data.get("quantity"),
            data.get("staff_id"),
            data.get("customer_id"),
            **_payment_kwargs(data),
        )
        return jsonify(transaction.to_dict_with_relations()), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Failed to record sale"}), 500


@sales_bp.post("/checkout")
@require_business
def checkout():
    """
    Body: {store_id, staff_id, customer_id, items: [{inventory_id, quantity}], payment_method?, ...}
    """
    try:
        data = _body()
        store = scoped_store(data.get("store_id"))
        transactions = sales_service.checkout(
            store.id,
            data.get("staff_id"),
            data.get("customer_id"),
            data.get("items"),
            **_payment_kwargs(data),
        )
        return jsonify({
            "transactions": [t.to_dict_with_relations() for t in transactions],
            "total_price_cents": sum(t.checkout.total_price_cents for t in transactions),
        }), 201
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Checkout failed")
        return jsonify({"error": "Checkout failed"}), 500
