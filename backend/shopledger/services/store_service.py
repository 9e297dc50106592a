from __future__ import annotations

import re

from flask import current_app

from shopledger.extensions import db
from shopledger.models import Store, StoreCounter, Customer, Staff, InventoryItem
from shopledger.validation import ModelValidationPolicy, ConflictError, NotFoundError, ValidationError, validate_payload
from shopledger.services.audit_service import log_modification
from shopledger.services.concurrency import begin_write, lock_for_update, run_with_retry
from shopledger.services.constraints import ensure_unique, flush_or_conflict
from shopledger.services.tenant_service import require_business, require_store_in_business


STORE_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "code", "address", "phone", "phone_country_code",
        "country", "currency", "manager_staff_id", "is_active",
    },
    required_on_create={"name", "code"},
    upper_fields={"code", "country", "currency"},
)


STORE_CODE_MAX_LENGTH = 10


def sanitize_store_code(value: str) -> str:
    """Store codes prefix customer numbers: letters and digits only, at most 10."""
    return re.sub(r"[^A-Z0-9]", "", value.strip().upper())[:STORE_CODE_MAX_LENGTH]


def _normalize_code(patch: dict) -> None:
    if "code" not in patch:
        return
    code = sanitize_store_code(patch["code"] or "")
    if not code:
        raise ValidationError("Store code must contain letters or digits", field="code")
    patch["code"] = code


def _check_unique(business_id: int, patch: dict, exclude_id: int | None = None) -> None:
    ensure_unique(
        Store,
        scope_field="business_id",
        scope_value=business_id,
        field="name",
        value=patch.get("name"),
        message=f"A store named '{patch.get('name')}' already exists in this business.",
        exclude_id=exclude_id,
    )
    ensure_unique(
        Store,
        scope_field="business_id",
        scope_value=business_id,
        field="code",
        value=patch.get("code"),
        message=f"Store code '{patch.get('code')}' is already in use in this business.",
        exclude_id=exclude_id,
    )


def _check_manager(store_id: int | None, manager_staff_id: int | None) -> None:
    if manager_staff_id is None:
        return
    staff = db.session.get(Staff, manager_staff_id)
    if not staff or staff.store_id != store_id:
        raise NotFoundError("Manager staff member not found in this store")


def create_store(business_id: int, payload: dict) -> Store:
    """
    Create a store and its customer-number counter in one transaction.
    """
    patch = validate_payload(model=Store, payload=payload, policy=STORE_POLICY, partial=False)
    _normalize_code(patch)
    if patch.get("manager_staff_id") is not None:
        # A brand-new store has no staff yet
        raise NotFoundError("Manager staff member not found in this store")

    def _op():
        require_business(business_id)
        _check_unique(business_id, patch)

        store = Store(business_id=business_id, **patch)
        store.phone_country_code = store.phone_country_code or current_app.config["DEFAULT_PHONE_COUNTRY_CODE"]
        store.country = store.country or current_app.config["DEFAULT_COUNTRY"]
        store.currency = store.currency or current_app.config["DEFAULT_CURRENCY"]

        db.session.add(store)
        flush_or_conflict("Store name or code is already in use in this business.", ("business_id", "code"))

        db.session.add(StoreCounter(store_id=store.id, next_customer_number=1))
        db.session.commit()
        return store

    store = run_with_retry(_op)
    log_modification("CREATE", "store", resource_id=store.id, store_id=store.id)
    return store


def update_store(business_id: int, store_id: int, payload: dict) -> Store:
    patch = validate_payload(model=Store, payload=payload, policy=STORE_POLICY, partial=True)
    _normalize_code(patch)

    def _op():
        require_store_in_business(store_id, business_id)
        store = lock_for_update(db.session.query(Store).filter_by(id=store_id)).first()

        _check_unique(business_id, patch, exclude_id=store_id)
        if "manager_staff_id" in patch:
            _check_manager(store_id, patch["manager_staff_id"])

        for key, value in patch.items():
            setattr(store, key, value)

        flush_or_conflict("Store name or code is already in use in this business.", ("business_id", "code"))
        db.session.commit()
        return store

    store = run_with_retry(_op)
    log_modification("UPDATE", "store", resource_id=store.id, store_id=store.id)
    return store


def get_store(business_id: int, store_id: int) -> Store:
    return require_store_in_business(store_id, business_id)


def list_stores(business_id: int, *, active_only: bool = False) -> list[Store]:
    query = db.session.query(Store).filter_by(business_id=business_id)
    if active_only:
        query = query.filter(Store.is_active.is_(True))
    return query.order_by(Store.name.asc()).all()


def has_store_data(store_id: int) -> bool:
    for model in (Customer, Staff, InventoryItem):
        if db.session.query(model.id).filter_by(store_id=store_id).first() is not None:
            return True
    return False


def delete_store(business_id: int, store_id: int) -> None:
    """
    Delete an empty store.

    Restrict policy: a store that still owns customers, staff or inventory
    is rejected, since those rows anchor sales history.
    """
    def _op():
        begin_write()
        require_store_in_business(store_id, business_id)

        if has_store_data(store_id):
            raise ConflictError(
                "This store has customers, staff, or inventory. "
                "Please remove them first before deleting the store.",
                fields=("store_id",),
            )

        db.session.query(StoreCounter).filter_by(store_id=store_id).delete()
        db.session.query(Store).filter_by(id=store_id).delete()
        db.session.commit()

    run_with_retry(_op)
    log_modification("DELETE", "store", resource_id=store_id, store_id=store_id)
