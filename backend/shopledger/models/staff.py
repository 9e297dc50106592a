from __future__ import annotations

from ..extensions import db


STAFF_ROLES = ("manager", "regular")


class Staff(db.Model):
    """Staff member of a single store; checkouts are attributed to staff."""
    __tablename__ = "staff"
    __table_args__ = (
        db.UniqueConstraint("store_id", "staff_number", name="uq_staff_store_number"),
        db.Index("ix_staff_store_archived", "store_id", "is_archived"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    staff_number = db.Column(db.String(64), nullable=False)
    mobile_number = db.Column(db.String(32), nullable=False)
    country_code = db.Column(db.String(8), nullable=False, default="+234")
    pay_per_month_cents = db.Column(db.Integer, nullable=False, default=0)
    signed_contract = db.Column(db.Boolean, nullable=False, default=False)
    role = db.Column(db.String(16), nullable=False, default="regular")

    is_archived = db.Column(db.Boolean, nullable=False, default=False, index=True)

    store = db.relationship("Store", foreign_keys=[store_id], backref=db.backref("staff", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "staff_number": self.staff_number,
            "mobile_number": self.mobile_number,
            "country_code": self.country_code,
            "pay_per_month_cents": self.pay_per_month_cents,
            "signed_contract": self.signed_contract,
            "role": self.role,
            "is_archived": self.is_archived,
        }
