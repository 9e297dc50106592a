# Overview: Bulk import of customers, staff and inventory from JSON rows or uploaded files.

from __future__ import annotations

import csv
import io
import json
from typing import Any

from flask import current_app
from openpyxl import load_workbook

from ..validation import ValidationError
from .audit_service import log_modification
from .import_schemas import SCHEMAS


SPREADSHEET_EXTENSIONS = {"xlsx", "xlsm", "xltx", "xltm"}


def _strip_headers(row: dict) -> dict:
    return {str(k).strip(): v for k, v in row.items() if k is not None and str(k).strip()}


def parse_upload(filename: str, stream) -> list[dict[str, Any]]:
    """
    Read rows from an uploaded .csv, .json or .xlsx file.
    The first line (or sheet row) holds the column names.
    """
    ext = (filename or "").rsplit(".", 1)[-1].lower()

    if ext == "csv":
        text = stream.read()
        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        reader = csv.DictReader(io.StringIO(text))
        return [_strip_headers(row) for row in reader]

    if ext == "json":
        rows = json.load(stream)
        if isinstance(rows, dict):
            rows = rows.get("data", [])
        if not isinstance(rows, list):
            raise ValidationError("JSON upload must be a list of rows", field="file")
        return rows

    if ext in SPREADSHEET_EXTENSIONS:
        wb = load_workbook(stream, data_only=True)
        try:
            data = list(wb.active.values)
        finally:
            wb.close()
        if not data:
            return []
        headers = [str(h).strip() if h is not None else "" for h in data[0]]
        rows = []
        for values in data[1:]:
            if values is None or all(v is None for v in values):
                continue
            rows.append({
                headers[i]: values[i]
                for i in range(min(len(headers), len(values)))
                if headers[i]
            })
        return rows

    raise ValidationError("Unsupported file format. Use .csv, .json or .xlsx", field="file")


def bulk_import(entity: str, store_id: int, rows: list) -> dict:
    """
    Create one record per row, each in its own transaction.

    A failing row does not stop the batch. Row numbers in the error list are
    spreadsheet rows: the header is row 1, so data row i is reported as i + 2.
    """
    schema = SCHEMAS.get(entity)
    if schema is None:
        raise ValidationError(f"Unknown import type: {entity}", field="entity")
    if not isinstance(rows, list):
        raise ValidationError("data must be a list of rows", field="data")

    success = 0
    errors: list[dict[str, Any]] = []

    for index, raw_row in enumerate(rows):
        row_number = index + 2
        if not isinstance(raw_row, dict):
            errors.append({"row": row_number, "message": "Row must be an object"})
            continue
        try:
            normalized = schema.normalize_row(raw_row)
            schema.post_row(store_id, normalized)
            success += 1
        except ValueError as exc:
            # Covers the domain errors and unparseable numbers
            errors.append({"row": row_number, "message": str(exc)})

    current_app.logger.info(
        "Bulk import %s into store %s: %s succeeded, %s failed",
        entity, store_id, success, len(errors),
    )
    log_modification(
        "IMPORT",
        entity,
        store_id=store_id,
        success=not errors,
        error=f"{len(errors)} rows failed" if errors else None,
    )
    return {"success": success, "failed": len(errors), "errors": errors}
