from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


PAYMENT_METHODS = ("cash", "transfer", "flutterwave")
PAYMENT_STATUSES = ("completed", "pending")


class Order(db.Model):
    """
    One sold line: an inventory item and a quantity.

    Unit price and unit cost are snapshotted at sale time so later price
    changes never alter historical totals.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_store_inventory", "store_id", "inventory_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    inventory_item = db.relationship("InventoryItem", backref=db.backref("orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "inventory_id": self.inventory_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "unit_cost_cents": self.unit_cost_cents,
            "total_price_cents": self.total_price_cents,
            "created_at": to_utc_z(self.created_at),
        }


class Checkout(db.Model):
    """Receipt finalizing exactly one Order, attributed to a staff member."""
    __tablename__ = "checkouts"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_checkouts_order"),
        db.Index("ix_checkouts_store_created", "store_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    total_price_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    payment_status = db.Column(db.String(16), nullable=False, default="completed")
    payment_reference = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    staff = db.relationship("Staff", backref=db.backref("checkouts", lazy=True))
    order = db.relationship("Order", backref=db.backref("checkout", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "staff_id": self.staff_id,
            "order_id": self.order_id,
            "total_price_cents": self.total_price_cents,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "payment_reference": self.payment_reference,
            "created_at": to_utc_z(self.created_at),
        }


class Transaction(db.Model):
    """
    Attributes a completed checkout to the purchasing customer.

    IMMUTABLE: rows are never updated or deleted.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_store_date", "store_id", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)
    checkout_id = db.Column(db.Integer, db.ForeignKey("checkouts.id"), nullable=False, index=True)

    transaction_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))
    inventory_item = db.relationship("InventoryItem", backref=db.backref("transactions", lazy=True))
    checkout = db.relationship("Checkout", backref=db.backref("transactions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "customer_id": self.customer_id,
            "inventory_id": self.inventory_id,
            "checkout_id": self.checkout_id,
            "transaction_date": to_utc_z(self.transaction_date),
        }

    def to_dict_with_relations(self) -> dict:
        data = self.to_dict()
        checkout = self.checkout.to_dict()
        checkout["staff"] = self.checkout.staff.to_dict()
        checkout["order"] = self.checkout.order.to_dict()
        data["customer"] = self.customer.to_dict()
        data["inventory"] = self.inventory_item.to_dict()
        data["checkout"] = checkout
        return data
