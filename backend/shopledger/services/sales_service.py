"""
Sales Service - one consistent sale event per line

A sold line becomes an Order (price snapshot), a Checkout (attributed to a
staff member) and a Transaction (attributed to a customer). Product stock is
decremented and the line is folded into the store's ProfitLoss totals.

Everything for one call, single line or whole cart, happens in ONE database
transaction: either every line is applied or none is.
"""

from __future__ import annotations

from ..extensions import db
from ..models import (
    Checkout,
    Customer,
    InventoryItem,
    Order,
    Staff,
    Transaction,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
)
from ..time_utils import utcnow
from ..validation import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    enforce_rules_sale_quantity,
)
from . import profit_loss_service
from .audit_service import log_modification
from .concurrency import begin_write, lock_for_update, run_with_retry


def _normalize_payment(
    payment_method: str | None,
    payment_status: str | None,
    payment_reference: str | None,
) -> tuple[str, str, str | None]:
    method = payment_method or "cash"
    status = payment_status or "completed"
    if not isinstance(method, str) or not isinstance(status, str):
        raise ValidationError("payment_method and payment_status must be text", field="payment_method")

    method = method.strip().lower()
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}",
            field="payment_method",
        )
    status = status.strip().lower()
    if status not in PAYMENT_STATUSES:
        raise ValidationError(
            f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}",
            field="payment_status",
        )
    reference = payment_reference.strip() if isinstance(payment_reference, str) else None
    if reference and len(reference) > 128:
        raise ValidationError("payment_reference exceeds max length 128", field="payment_reference")
    return method, status, reference or None


def _parse_id(value, field: str) -> int:
    """Record id from JSON input: an integer or a digit string."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    return value


def _normalize_lines(items) -> list[tuple[int, int]]:
    if not isinstance(items, list) or not items:
        raise ValidationError("Cart must contain at least one item", field="items")

    lines = []
    for entry in items:
        if not isinstance(entry, dict):
            raise ValidationError("Each cart item needs inventory_id and quantity", field="items")
        inventory_id = _parse_id(entry.get("inventory_id"), "inventory_id")
        lines.append((inventory_id, enforce_rules_sale_quantity(entry.get("quantity"))))
    return lines


def _lock_items(store_id: int, lines: list[tuple[int, int]]) -> dict[int, InventoryItem]:
    """
    Lock every referenced item and check stock against the combined
    quantity per item. Raises before anything is written.
    """
    requested: dict[int, int] = {}
    for inventory_id, quantity in lines:
        requested[inventory_id] = requested.get(inventory_id, 0) + quantity

    items: dict[int, InventoryItem] = {}
    # Fixed lock order across carts
    for inventory_id in sorted(requested):
        item = lock_for_update(
            db.session.query(InventoryItem).filter_by(id=inventory_id, store_id=store_id)
        ).first()
        if not item:
            raise NotFoundError("Inventory item not found")
        items[inventory_id] = item

    insufficient = []
    for inventory_id, qty in requested.items():
        item = items[inventory_id]
        if item.is_product and qty > item.quantity:
            insufficient.append({
                "inventory_id": inventory_id,
                "requested_quantity": qty,
                "on_hand": item.quantity,
            })

    if insufficient:
        first = insufficient[0]
        item = items[first["inventory_id"]]
        raise InsufficientStockError(
            f"Insufficient stock for '{item.name}'. Available: {first['on_hand']}, "
            f"requested: {first['requested_quantity']}",
            details={**first, "items": insufficient},
        )
    return items


def _resolve_staff(store_id: int, staff_id) -> Staff:
    staff = db.session.query(Staff).filter_by(id=staff_id, store_id=store_id).first()
    if not staff:
        raise NotFoundError("Staff member not found")
    if staff.is_archived:
        raise ValidationError("Archived staff cannot process sales", field="staff_id")
    return staff


def _resolve_customer(store_id: int, customer_id) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id, store_id=store_id).first()
    if not customer:
        raise NotFoundError("Customer not found")
    if customer.is_archived:
        raise ValidationError("Archived customers cannot make purchases", field="customer_id")
    return customer


def _apply_line(
    store_id: int,
    item: InventoryItem,
    quantity: int,
    staff: Staff,
    customer: Customer,
    payment: tuple[str, str, str | None],
    now,
) -> Transaction:
    method, status, reference = payment
    total_price_cents = quantity * item.selling_price_cents

    order = Order(
        store_id=store_id,
        inventory_id=item.id,
        quantity=quantity,
        unit_price_cents=item.selling_price_cents,
        unit_cost_cents=item.cost_price_cents,
        total_price_cents=total_price_cents,
        created_at=now,
    )
    db.session.add(order)
    db.session.flush()

    checkout = Checkout(
        store_id=store_id,
        staff_id=staff.id,
        order_id=order.id,
        total_price_cents=total_price_cents,
        payment_method=method,
        payment_status=status,
        payment_reference=reference,
        created_at=now,
    )
    db.session.add(checkout)
    db.session.flush()

    transaction = Transaction(
        store_id=store_id,
        customer_id=customer.id,
        inventory_id=item.id,
        checkout_id=checkout.id,
        transaction_date=now,
    )
    db.session.add(transaction)

    if item.is_product:
        if quantity > item.quantity:
            raise InsufficientStockError(
                f"Insufficient stock for '{item.name}'",
                details={"inventory_id": item.id, "requested_quantity": quantity, "on_hand": item.quantity},
            )
        item.quantity -= quantity
    db.session.flush()

    profit_loss_service.record_sale(
        store_id,
        item.id,
        quantity,
        revenue_cents=total_price_cents,
        cost_basis_cents=quantity * item.cost_price_cents,
    )
    return transaction


def _post(store_id: int, staff_id, customer_id, lines, payment) -> list[Transaction]:
    def _op():
        begin_write()
        items = _lock_items(store_id, lines)
        staff = _resolve_staff(store_id, staff_id)
        customer = _resolve_customer(store_id, customer_id)

        now = utcnow()
        transactions = [
            _apply_line(store_id, items[inventory_id], quantity, staff, customer, payment, now)
            for inventory_id, quantity in lines
        ]
        db.session.commit()
        return transactions

    try:
        transactions = run_with_retry(_op)
    except (ValidationError, NotFoundError, InsufficientStockError) as exc:
        log_modification("SALE", "transaction", store_id=store_id, success=False, error=str(exc))
        raise

    for transaction in transactions:
        log_modification("SALE", "transaction", resource_id=transaction.id, store_id=store_id)
    return transactions


def record_sale(
    store_id: int,
    inventory_id: int,
    quantity,
    staff_id: int,
    customer_id: int,
    *,
    payment_method: str | None = None,
    payment_status: str | None = None,
    payment_reference: str | None = None,
) -> Transaction:
    """Sell one line. Returns the Transaction (with checkout and order attached)."""
    lines = _normalize_lines([{"inventory_id": inventory_id, "quantity": quantity}])
    staff_id = _parse_id(staff_id, "staff_id")
    customer_id = _parse_id(customer_id, "customer_id")
    payment = _normalize_payment(payment_method, payment_status, payment_reference)
    return _post(store_id, staff_id, customer_id, lines, payment)[0]


def checkout(
    store_id: int,
    staff_id: int,
    customer_id: int,
    items: list[dict],
    *,
    payment_method: str | None = None,
    payment_status: str | None = None,
    payment_reference: str | None = None,
) -> list[Transaction]:
    """
    Sell a whole cart of {inventory_id, quantity} lines.

    Lines for the same item are checked against their combined quantity,
    and one failing line means no line is applied.
    """
    lines = _normalize_lines(items)
    staff_id = _parse_id(staff_id, "staff_id")
    customer_id = _parse_id(customer_id, "customer_id")
    payment = _normalize_payment(payment_method, payment_status, payment_reference)
    return _post(store_id, staff_id, customer_id, lines, payment)
