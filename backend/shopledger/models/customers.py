from __future__ import annotations

from ..extensions import db


class Customer(db.Model):
    """
    Customer of a single store.

    Customer numbers are unique per store. Archived customers keep their
    number and their purchase history; they are only hidden from active lists.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("store_id", "customer_number", name="uq_customers_store_number"),
        db.Index("ix_customers_store_archived", "store_id", "is_archived"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    customer_number = db.Column(db.String(64), nullable=False)
    mobile_number = db.Column(db.String(32), nullable=True)
    country_code = db.Column(db.String(8), nullable=False, default="+234")
    address = db.Column(db.String(500), nullable=False, default="")

    is_archived = db.Column(db.Boolean, nullable=False, default=False, index=True)

    store = db.relationship("Store", backref=db.backref("customers", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "customer_number": self.customer_number,
            "mobile_number": self.mobile_number,
            "country_code": self.country_code,
            "address": self.address,
            "is_archived": self.is_archived,
        }
