from __future__ import annotations

from ..extensions import db


INVENTORY_TYPES = ("product", "service")


class InventoryItem(db.Model):
    """
    Sellable product or service of a store.

    Only products carry stock: a service's quantity is held at 0 and sales
    never deplete it. Prices are the current list prices; each Order keeps
    its own snapshot.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_inventory_store_name"),
        db.Index("ix_inventory_store_type", "store_id", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=False)
    selling_price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    store = db.relationship("Store", backref=db.backref("inventory_items", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_product(self) -> bool:
        return self.type == "product"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "type": self.type,
            "cost_price_cents": self.cost_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "quantity": self.quantity,
            "version_id": self.version_id,
        }
