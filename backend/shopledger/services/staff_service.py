from __future__ import annotations

from flask import current_app

from shopledger.extensions import db
from shopledger.models import Checkout, Staff, Store, STAFF_ROLES
from shopledger.validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_money,
    validate_payload,
)
from shopledger.services.audit_service import log_modification
from shopledger.services.concurrency import begin_write, lock_for_update, run_with_retry
from shopledger.services.constraints import ensure_unique, flush_or_conflict


STAFF_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "staff_number", "mobile_number", "country_code",
        "pay_per_month_cents", "signed_contract", "role",
    },
    required_on_create={"name", "staff_number", "mobile_number"},
    enum_fields={"role": STAFF_ROLES},
)


def _validate(payload: dict, partial: bool) -> dict:
    if isinstance(payload, dict) and isinstance(payload.get("role"), str):
        payload = {**payload, "role": payload["role"].strip().lower()}
    patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=partial)
    enforce_rules_money(patch, ("pay_per_month_cents",))
    for key in ("name", "staff_number", "mobile_number"):
        if key in patch and not patch[key]:
            raise ValidationError(f"{key.replace('_', ' ').capitalize()} is required", field=key)
    return patch


def _duplicate_message(number: str) -> str:
    return f"Staff number '{number}' is already used in this store."


def create_staff(store_id: int, payload: dict) -> Staff:
    patch = _validate(payload, partial=False)

    def _op():
        begin_write()
        if not db.session.get(Store, store_id):
            raise NotFoundError("Store not found")
        ensure_unique(
            Staff,
            scope_field="store_id",
            scope_value=store_id,
            field="staff_number",
            value=patch["staff_number"],
            message=_duplicate_message(patch["staff_number"]),
        )

        staff = Staff(store_id=store_id, is_archived=False, **patch)
        staff.country_code = staff.country_code or current_app.config["DEFAULT_PHONE_COUNTRY_CODE"]
        staff.role = staff.role or "regular"
        db.session.add(staff)
        flush_or_conflict(_duplicate_message(patch["staff_number"]), ("store_id", "staff_number"))
        db.session.commit()
        return staff

    staff = run_with_retry(_op)
    log_modification("CREATE", "staff", resource_id=staff.id, store_id=store_id)
    return staff


def get_staff(store_id: int, staff_id: int) -> Staff:
    staff = db.session.query(Staff).filter_by(id=staff_id, store_id=store_id).first()
    if not staff:
        raise NotFoundError("Staff member not found")
    return staff


def list_staff(store_id: int, *, include_archived: bool = False) -> list[Staff]:
    query = db.session.query(Staff).filter_by(store_id=store_id)
    if not include_archived:
        query = query.filter(Staff.is_archived.is_(False))
    return query.order_by(Staff.name.asc(), Staff.id.asc()).all()


def update_staff(store_id: int, staff_id: int, payload: dict) -> Staff:
    patch = _validate(payload, partial=True)

    def _op():
        staff = lock_for_update(db.session.query(Staff).filter_by(id=staff_id, store_id=store_id)).first()
        if not staff:
            raise NotFoundError("This staff member no longer exists. It may have been deleted.")

        if "staff_number" in patch:
            ensure_unique(
                Staff,
                scope_field="store_id",
                scope_value=store_id,
                field="staff_number",
                value=patch["staff_number"],
                message=_duplicate_message(patch["staff_number"]),
                exclude_id=staff_id,
            )

        for key, value in patch.items():
            setattr(staff, key, value)

        flush_or_conflict(_duplicate_message(staff.staff_number), ("store_id", "staff_number"))
        db.session.commit()
        return staff

    staff = run_with_retry(_op)
    log_modification("UPDATE", "staff", resource_id=staff.id, store_id=store_id)
    return staff


def _set_archived(store_id: int, staff_id: int, archived: bool) -> Staff:
    def _op():
        staff = lock_for_update(db.session.query(Staff).filter_by(id=staff_id, store_id=store_id)).first()
        if not staff:
            raise NotFoundError("Staff member not found")
        staff.is_archived = archived
        db.session.commit()
        return staff

    return run_with_retry(_op)


def archive_staff(store_id: int, staff_id: int) -> Staff:
    staff = _set_archived(store_id, staff_id, True)
    log_modification("ARCHIVE", "staff", resource_id=staff_id, store_id=store_id)
    return staff


def restore_staff(store_id: int, staff_id: int) -> Staff:
    staff = _set_archived(store_id, staff_id, False)
    log_modification("RESTORE", "staff", resource_id=staff_id, store_id=store_id)
    return staff


def delete_staff(store_id: int, staff_id: int) -> None:
    # Only archived staff without checkouts; checkouts keep their staff reference
    def _op():
        begin_write()
        staff = get_staff(store_id, staff_id)
        if not staff.is_archived:
            raise ConflictError(
                "Only archived staff can be permanently deleted.",
                fields=("is_archived",),
            )
        if db.session.query(Checkout.id).filter_by(staff_id=staff_id).first() is not None:
            raise ConflictError(
                "Cannot permanently delete staff with existing sales records. "
                "This staff member has checkout history that must be preserved for your records.",
                fields=("staff_id",),
            )
        db.session.query(Store).filter_by(id=store_id, manager_staff_id=staff_id).update(
            {"manager_staff_id": None}, synchronize_session=False
        )
        db.session.delete(staff)
        db.session.commit()

    run_with_retry(_op)
    log_modification("DELETE", "staff", resource_id=staff_id, store_id=store_id)
