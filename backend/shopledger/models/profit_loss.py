from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


class ProfitLoss(db.Model):
    """
    Running sales totals per (store, inventory item).

    total_quantity_sold and total_revenue_cents only ever grow.
    quantity_remaining mirrors the item's stock as of the last recorded sale.
    """
    __tablename__ = "profit_loss"
    __table_args__ = (
        db.UniqueConstraint("store_id", "inventory_id", name="uq_profit_loss_store_inventory"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)

    total_quantity_sold = db.Column(db.Integer, nullable=False, default=0)
    quantity_remaining = db.Column(db.Integer, nullable=False, default=0)
    total_revenue_cents = db.Column(db.Integer, nullable=False, default=0)
    total_net_profit_cents = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    inventory_item = db.relationship("InventoryItem", backref=db.backref("profit_loss", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "inventory_id": self.inventory_id,
            "total_quantity_sold": self.total_quantity_sold,
            "quantity_remaining": self.quantity_remaining,
            "total_revenue_cents": self.total_revenue_cents,
            "total_net_profit_cents": self.total_net_profit_cents,
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_dict_with_inventory(self) -> dict:
        data = self.to_dict()
        data["inventory"] = self.inventory_item.to_dict()
        return data
