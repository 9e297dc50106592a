# Overview: Flask API routes for transaction history and its CSV export.

from flask import Blueprint, Response, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response, request_store, require_business
from shopledger.services import export_service, reporting_service


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_business
def list_transactions():
    try:
        store = request_store()
        transactions = reporting_service.list_transactions(
            store.id,
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return jsonify([t.to_dict_with_relations() for t in transactions]), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)


@transactions_bp.get("/export")
@require_business
def export_transactions():
    try:
        store = request_store()
        body = export_service.transactions_csv(
            store.id,
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
    except DOMAIN_ERRORS as exc:
        return error_response(exc)

    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename=transactions-{store.code}.csv"},
    )
