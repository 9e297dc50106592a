# Overview: Shared bulk import handler for the /bulk endpoints; accepts JSON rows or an uploaded file.

from flask import current_app, jsonify, request

from shopledger.decorators import DOMAIN_ERRORS, error_response, scoped_store
from shopledger.services import import_service


def run_bulk_import(entity: str):
    """
    JSON body: {"store_id": 1, "data": [{...}, ...]}
    Multipart: form field store_id plus a .csv/.json/.xlsx file under "file".
    """
    try:
        if "file" in request.files:
            store = scoped_store(request.form.get("store_id") or request.args.get("store_id"))
            file = request.files["file"]
            try:
                rows = import_service.parse_upload(file.filename or "", file.stream)
            except DOMAIN_ERRORS:
                raise
            except Exception:
                current_app.logger.warning("Unreadable %s upload: %s", entity, file.filename, exc_info=True)
                return jsonify({"error": "Failed to parse upload"}), 400
        else:
            body = request.get_json(silent=True) or {}
            if not isinstance(body, dict):
                return jsonify({"error": "Invalid JSON payload"}), 400
            store = scoped_store(body.get("store_id", request.args.get("store_id")))
            rows = body.get("data")

        result = import_service.bulk_import(entity, store.id, rows)
        return jsonify(result), 200
    except DOMAIN_ERRORS as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Bulk import of %s failed", entity)
        return jsonify({"error": "Failed to import data"}), 500
