# Overview: Service-layer operations for customers; encapsulates business logic and database work.

"""
Customer Service

Customers belong to exactly one store. A blank customer number is filled
from the store's counter ("{STORE_CODE}-0001", "{STORE_CODE}-0002", ...).

Archive policy: archiving hides a customer from active lists but keeps the
row, its purchase history and its customer number. The number stays taken
within the store until the customer is permanently deleted.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Customer, Store, Transaction
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    validate_payload,
)
from .audit_service import log_modification
from .concurrency import begin_write, lock_for_update, run_with_retry
from .constraints import ensure_unique, flush_or_conflict
from .counter_service import allocate_free_customer_number


CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "customer_number", "mobile_number", "country_code", "address"},
    required_on_create={"name"},
)


def _duplicate_message(number: str) -> str:
    return f"Customer number '{number}' is already used in this store."


def create_customer(store_id: int, payload: dict) -> Customer:
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)

    def _op():
        begin_write()
        store = db.session.get(Store, store_id)
        if not store:
            raise NotFoundError("Store not found")

        number = patch.get("customer_number")
        if not number:
            _, number = allocate_free_customer_number(store)
        ensure_unique(
            Customer,
            scope_field="store_id",
            scope_value=store_id,
            field="customer_number",
            value=number,
            message=_duplicate_message(number),
        )

        customer = Customer(
            store_id=store_id,
            name=patch["name"],
            customer_number=number,
            mobile_number=patch.get("mobile_number"),
            country_code=patch.get("country_code") or current_app.config["DEFAULT_PHONE_COUNTRY_CODE"],
            address=patch.get("address") or "",
            is_archived=False,
        )
        db.session.add(customer)
        flush_or_conflict(_duplicate_message(number), ("store_id", "customer_number"))
        db.session.commit()
        return customer

    customer = run_with_retry(_op)
    log_modification("CREATE", "customer", resource_id=customer.id, store_id=store_id)
    return customer


def get_customer(store_id: int, customer_id: int) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id, store_id=store_id).first()
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def list_customers(store_id: int, *, include_archived: bool = False) -> list[Customer]:
    query = db.session.query(Customer).filter_by(store_id=store_id)
    if not include_archived:
        query = query.filter(Customer.is_archived.is_(False))
    return query.order_by(Customer.customer_number.asc(), Customer.id.asc()).all()


def update_customer(store_id: int, customer_id: int, payload: dict) -> Customer:
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    if "name" in patch and not patch["name"]:
        raise ValidationError("Customer name is required", field="name")
    if "customer_number" in patch and not patch["customer_number"]:
        raise ValidationError("Customer number cannot be blank", field="customer_number")

    def _op():
        customer = lock_for_update(
            db.session.query(Customer).filter_by(id=customer_id, store_id=store_id)
        ).first()
        if not customer:
            raise NotFoundError("This customer no longer exists. It may have been deleted.")

        if "customer_number" in patch:
            ensure_unique(
                Customer,
                scope_field="store_id",
                scope_value=store_id,
                field="customer_number",
                value=patch["customer_number"],
                message=_duplicate_message(patch["customer_number"]),
                exclude_id=customer_id,
            )

        for key, value in patch.items():
            if key == "address" and value is None:
                value = ""
            setattr(customer, key, value)

        flush_or_conflict(
            _duplicate_message(customer.customer_number), ("store_id", "customer_number")
        )
        db.session.commit()
        return customer

    customer = run_with_retry(_op)
    log_modification("UPDATE", "customer", resource_id=customer.id, store_id=store_id)
    return customer


def _set_archived(store_id: int, customer_id: int, archived: bool) -> Customer:
    def _op():
        customer = lock_for_update(
            db.session.query(Customer).filter_by(id=customer_id, store_id=store_id)
        ).first()
        if not customer:
            raise NotFoundError("Customer not found")
        customer.is_archived = archived
        db.session.commit()
        return customer

    return run_with_retry(_op)


def archive_customer(store_id: int, customer_id: int) -> Customer:
    customer = _set_archived(store_id, customer_id, True)
    log_modification("ARCHIVE", "customer", resource_id=customer_id, store_id=store_id)
    return customer


def restore_customer(store_id: int, customer_id: int) -> Customer:
    customer = _set_archived(store_id, customer_id, False)
    log_modification("RESTORE", "customer", resource_id=customer_id, store_id=store_id)
    return customer


def has_customer_transactions(customer_id: int) -> bool:
    return db.session.query(Transaction.id).filter_by(customer_id=customer_id).first() is not None


def delete_customer(store_id: int, customer_id: int) -> None:
    """
    Permanently delete an archived customer without purchase history.
    """
    def _op():
        begin_write()
        customer = get_customer(store_id, customer_id)
        if not customer.is_archived:
            raise ConflictError(
                "Only archived customers can be permanently deleted.",
                fields=("is_archived",),
            )
        if has_customer_transactions(customer_id):
            raise ConflictError(
                "Cannot permanently delete customer with existing transactions. "
                "This customer has purchase history that must be preserved for your records.",
                fields=("customer_id",),
            )
        db.session.delete(customer)
        db.session.commit()

    run_with_retry(_op)
    log_modification("DELETE", "customer", resource_id=customer_id, store_id=store_id)
