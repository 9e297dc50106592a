from flask import Blueprint, Response, jsonify

from shopledger.decorators import DOMAIN_ERRORS, error_response, request_store, require_business
from shopledger.services import export_service, profit_loss_service


profit_loss_bp = Blueprint("profit_loss", __name__, url_prefix="/api/profit-loss")


@profit_loss_bp.get("")
@require_business
def list_profit_loss():
    try:
        store = request_store()
        rows = profit_loss_service.list_profit_loss(store.id)
        return jsonify([row.to_dict_with_inventory() for row in rows]), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@profit_loss_bp.get("/export")
@require_business
def export_profit_loss():
    try:
        store = request_store()
        body = export_service.profit_loss_csv(store.id)
    except DOMAIN_ERRORS as exc:
        return error_response(exc)

    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename=profit-loss-{store.code}.csv"},
    )
