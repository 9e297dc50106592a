# Overview: Uniqueness checks that report the offending field pair as a ConflictError.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..validation import ConflictError


def ensure_unique(
    model,
    *,
    scope_field: str,
    scope_value: int,
    field: str,
    value,
    message: str,
    exclude_id: int | None = None,
) -> None:
    """
    Raise ConflictError if another row already holds (scope_field, field).

    Archived rows count: they keep their values until permanently deleted.
    """
    if value is None:
        return
    query = db.session.query(model.id).filter(
        getattr(model, scope_field) == scope_value,
        getattr(model, field) == value,
    )
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(message, fields=(scope_field, field))


def flush_or_conflict(message: str, fields: tuple[str, ...]) -> None:
    """
    Flush pending rows, turning a unique-constraint race into ConflictError.

    The pre-checks above catch the common case; this covers two writers
    passing the check at the same time on databases without BEGIN IMMEDIATE.
    """
    try:
        db.session.flush()
    except IntegrityError as exc:
        raise ConflictError(message, fields=fields) from exc
