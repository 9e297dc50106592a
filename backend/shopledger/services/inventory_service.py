# Overview: Service-layer operations for inventory items; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import InventoryItem, Store, Transaction, INVENTORY_TYPES
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_inventory,
    validate_payload,
)
from .audit_service import log_modification
from .concurrency import begin_write, lock_for_update, run_with_retry
from .constraints import ensure_unique, flush_or_conflict


INVENTORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "type", "cost_price_cents", "selling_price_cents", "quantity"},
    required_on_create={"name", "type", "cost_price_cents", "selling_price_cents"},
    enum_fields={"type": INVENTORY_TYPES},
)


def _validate(payload: dict, partial: bool) -> dict:
    if isinstance(payload, dict) and isinstance(payload.get("type"), str):
        payload = {**payload, "type": payload["type"].strip().lower()}
    patch = validate_payload(model=InventoryItem, payload=payload, policy=INVENTORY_POLICY, partial=partial)
    if "name" in patch and not patch["name"]:
        raise ValidationError("Name is required", field="name")
    enforce_rules_inventory(patch)
    return patch


def _duplicate_message(name: str) -> str:
    return f"An item named '{name}' already exists in this store."


def create_item(store_id: int, payload: dict) -> InventoryItem:
    """
    Create a product or service. Services never hold stock, so their
    quantity is stored as 0 whatever the payload says.
    """
    patch = _validate(payload, partial=False)
    if patch["type"] == "service":
        patch["quantity"] = 0

    def _op():
        if not db.session.get(Store, store_id):
            raise NotFoundError("Store not found")
        ensure_unique(
            InventoryItem,
            scope_field="store_id",
            scope_value=store_id,
            field="name",
            value=patch["name"],
            message=_duplicate_message(patch["name"]),
        )

        item = InventoryItem(store_id=store_id, **patch)
        item.quantity = item.quantity or 0
        db.session.add(item)
        flush_or_conflict(_duplicate_message(patch["name"]), ("store_id", "name"))
        db.session.commit()
        return item

    item = run_with_retry(_op)
    log_modification("CREATE", "inventory", resource_id=item.id, store_id=store_id)
    return item


def get_item(store_id: int, item_id: int) -> InventoryItem:
    item = db.session.query(InventoryItem).filter_by(id=item_id, store_id=store_id).first()
    if not item:
        raise NotFoundError("Inventory item not found")
    return item


def list_items(store_id: int, *, type: str | None = None, low_stock: bool = False) -> list[InventoryItem]:
    query = db.session.query(InventoryItem).filter_by(store_id=store_id)
    if type:
        kind = type.strip().lower()
        if kind not in INVENTORY_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(INVENTORY_TYPES)}", field="type")
        query = query.filter(InventoryItem.type == kind)
    if low_stock:
        query = query.filter(
            InventoryItem.type == "product",
            InventoryItem.quantity <= current_app.config["LOW_STOCK_THRESHOLD"],
        )
    return query.order_by(InventoryItem.name.asc()).all()


def update_item(store_id: int, item_id: int, payload: dict) -> InventoryItem:
    patch = _validate(payload, partial=True)

    def _op():
        item = lock_for_update(
            db.session.query(InventoryItem).filter_by(id=item_id, store_id=store_id)
        ).first()
        if not item:
            raise NotFoundError("This item no longer exists. It may have been deleted.")

        if "name" in patch:
            ensure_unique(
                InventoryItem,
                scope_field="store_id",
                scope_value=store_id,
                field="name",
                value=patch["name"],
                message=_duplicate_message(patch["name"]),
                exclude_id=item_id,
            )

        for key, value in patch.items():
            setattr(item, key, value)
        if item.type == "service":
            item.quantity = 0

        flush_or_conflict(_duplicate_message(item.name), ("store_id", "name"))
        db.session.commit()
        return item

    item = run_with_retry(_op)
    log_modification("UPDATE", "inventory", resource_id=item.id, store_id=store_id)
    return item


def delete_item(store_id: int, item_id: int) -> None:
    def _op():
        begin_write()
        item = get_item(store_id, item_id)
        if db.session.query(Transaction.id).filter_by(inventory_id=item_id).first() is not None:
            raise ConflictError(
                "Cannot delete inventory item with existing transactions. "
                "This item has sales history that must be preserved for your records.",
                fields=("inventory_id",),
            )
        db.session.delete(item)
        db.session.commit()

    run_with_retry(_op)
    log_modification("DELETE", "inventory", resource_id=item_id, store_id=store_id)
