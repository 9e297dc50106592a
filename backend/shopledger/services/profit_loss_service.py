"""
Profit/Loss aggregation.

One ProfitLoss row per (store, inventory item) holds lifetime sales totals.
Rows are only ever created or incremented by recorded sales; there is no
reversal path, so sold quantity and revenue never go down.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import InventoryItem, ProfitLoss
from ..validation import NotFoundError
from .concurrency import lock_for_update


def _locked_row(store_id: int, inventory_id: int) -> ProfitLoss | None:
    return lock_for_update(
        db.session.query(ProfitLoss).filter_by(store_id=store_id, inventory_id=inventory_id)
    ).first()


def record_sale(
    store_id: int,
    inventory_id: int,
    quantity_sold: int,
    revenue_cents: int,
    cost_basis_cents: int,
) -> ProfitLoss:
    """
    Fold one sale into the running totals. Runs inside the caller's
    transaction; the caller commits.

    quantity_remaining is overwritten with the item's current stock, so
    call this after the stock decrement.
    """
    item = db.session.query(InventoryItem).filter_by(id=inventory_id, store_id=store_id).first()
    if not item:
        raise NotFoundError("Inventory item not found")

    profit_cents = revenue_cents - cost_basis_cents
    row = _locked_row(store_id, inventory_id)

    if row is None:
        try:
            with db.session.begin_nested():
                row = ProfitLoss(
                    store_id=store_id,
                    inventory_id=inventory_id,
                    total_quantity_sold=quantity_sold,
                    quantity_remaining=item.quantity,
                    total_revenue_cents=revenue_cents,
                    total_net_profit_cents=profit_cents,
                )
                db.session.add(row)
            return row
        except IntegrityError:
            # Lost the first-insert race; fall through to the increment path
            row = _locked_row(store_id, inventory_id)
            if row is None:
                raise

    row.total_quantity_sold += quantity_sold
    row.total_revenue_cents += revenue_cents
    row.total_net_profit_cents += profit_cents
    row.quantity_remaining = item.quantity
    db.session.flush()
    return row


def get_profit_loss(store_id: int, inventory_id: int) -> ProfitLoss | None:
    return db.session.query(ProfitLoss).filter_by(store_id=store_id, inventory_id=inventory_id).first()


def list_profit_loss(store_id: int) -> list[ProfitLoss]:
    return (
        db.session.query(ProfitLoss)
        .options(joinedload(ProfitLoss.inventory_item))
        .filter(ProfitLoss.store_id == store_id)
        .order_by(ProfitLoss.total_revenue_cents.desc(), ProfitLoss.id.asc())
        .all()
    )
