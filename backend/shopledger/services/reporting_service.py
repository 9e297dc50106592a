# Overview: Service-layer operations for reporting; read-only queries over recorded sales.

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import joinedload

from shopledger.extensions import db
from shopledger.models import (
    Checkout,
    Customer,
    InventoryItem,
    Order,
    ProfitLoss,
    Staff,
    Transaction,
)
from shopledger.time_utils import end_of_day, parse_iso_datetime, to_utc_z, utcnow
from shopledger.validation import ValidationError


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    try:
        start_dt = parse_iso_datetime(start) if start else None
        end_dt = parse_iso_datetime(end) if end else None
    except ValueError:
        raise ValidationError("start and end must be ISO-8601 dates", field="start")
    if end_dt is not None:
        end_dt = end_of_day(end_dt)
    if start_dt and end_dt and start_dt > end_dt:
        raise ValidationError("start must be before end", field="start")
    return start_dt, end_dt


def dashboard_stats(store_id: int) -> dict:
    threshold = current_app.config["LOW_STOCK_THRESHOLD"]

    active_customers = db.session.query(func.count(Customer.id)).filter(
        Customer.store_id == store_id, Customer.is_archived.is_(False)
    ).scalar()
    active_staff = db.session.query(func.count(Staff.id)).filter(
        Staff.store_id == store_id, Staff.is_archived.is_(False)
    ).scalar()

    type_counts = dict(
        db.session.query(InventoryItem.type, func.count(InventoryItem.id))
        .filter(InventoryItem.store_id == store_id)
        .group_by(InventoryItem.type)
        .all()
    )
    transaction_count = db.session.query(func.count(Transaction.id)).filter(
        Transaction.store_id == store_id
    ).scalar()

    revenue, profit = db.session.query(
        func.coalesce(func.sum(ProfitLoss.total_revenue_cents), 0),
        func.coalesce(func.sum(ProfitLoss.total_net_profit_cents), 0),
    ).filter(ProfitLoss.store_id == store_id).one()

    low_stock = (
        db.session.query(InventoryItem)
        .filter(
            InventoryItem.store_id == store_id,
            InventoryItem.type == "product",
            InventoryItem.quantity <= threshold,
        )
        .order_by(InventoryItem.quantity.asc(), InventoryItem.name.asc())
        .all()
    )

    products = type_counts.get("product", 0)
    services = type_counts.get("service", 0)
    return {
        "store_id": store_id,
        "total_customers": active_customers,
        "total_staff": active_staff,
        "total_inventory": products + services,
        "total_products": products,
        "total_services": services,
        "total_transactions": transaction_count,
        "total_revenue_cents": int(revenue),
        "total_profit_cents": int(profit),
        "low_stock_threshold": threshold,
        "low_stock_items": [item.to_dict() for item in low_stock],
    }


def sales_trends(store_id: int, days: int = 30) -> list[dict]:
    """Revenue and checkout count per calendar day, oldest first."""
    if days <= 0:
        raise ValidationError("days must be > 0", field="days")

    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    since = today - timedelta(days=days - 1)
    day = func.strftime("%Y-%m-%d", Checkout.created_at)

    rows = (
        db.session.query(
            day.label("date"),
            func.coalesce(func.sum(Checkout.total_price_cents), 0).label("revenue_cents"),
            func.count(Checkout.id).label("transactions"),
        )
        .filter(Checkout.store_id == store_id, Checkout.created_at >= since)
        .group_by("date")
        .order_by("date")
        .all()
    )
    return [
        {
            "date": row.date,
            "revenue_cents": int(row.revenue_cents),
            "transactions": row.transactions,
        }
        for row in rows
    ]


def revenue_by_type(store_id: int, limit: int = 10) -> list[dict]:
    rows = (
        db.session.query(ProfitLoss, InventoryItem)
        .join(InventoryItem, InventoryItem.id == ProfitLoss.inventory_id)
        .filter(ProfitLoss.store_id == store_id)
        .order_by(ProfitLoss.total_revenue_cents.desc(), InventoryItem.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "inventory_id": item.id,
            "name": item.name,
            "value_cents": pl.total_revenue_cents,
            "type": item.type,
        }
        for pl, item in rows
    ]


def list_transactions(store_id: int, start: str | None = None, end: str | None = None) -> list[Transaction]:
    start_dt, end_dt = _parse_range(start, end)

    query = (
        db.session.query(Transaction)
        .options(
            joinedload(Transaction.customer),
            joinedload(Transaction.inventory_item),
            joinedload(Transaction.checkout).joinedload(Checkout.staff),
            joinedload(Transaction.checkout).joinedload(Checkout.order),
        )
        .filter(Transaction.store_id == store_id)
    )
    if start_dt:
        query = query.filter(Transaction.transaction_date >= start_dt)
    if end_dt:
        query = query.filter(Transaction.transaction_date <= end_dt)

    return query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc()).all()


def order_totals(store_id: int) -> dict:
    """Order-level sums, used to cross-check the ProfitLoss aggregates."""
    revenue, cost, units = db.session.query(
        func.coalesce(func.sum(Order.total_price_cents), 0),
        func.coalesce(func.sum(Order.quantity * Order.unit_cost_cents), 0),
        func.coalesce(func.sum(Order.quantity), 0),
    ).filter(Order.store_id == store_id).one()
    return {
        "store_id": store_id,
        "units_sold": int(units),
        "revenue_cents": int(revenue),
        "net_profit_cents": int(revenue) - int(cost),
        "as_of": to_utc_z(utcnow()),
    }
