from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


class Business(db.Model):
    """
    Tenant root: every business owns its stores.

    All store-owned data (customers, staff, inventory, sales) is reached
    through a Store, and every Store belongs to exactly one Business.
    """
    __tablename__ = "businesses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    phone_country_code = db.Column(db.String(8), nullable=False, default="+234")
    email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "phone_country_code": self.phone_country_code,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }


class Store(db.Model):
    """
    Store within a business.

    Store names and codes are unique within a business, not globally.
    The code is stored upper-cased and prefixes generated customer numbers.
    """
    __tablename__ = "stores"
    __table_args__ = (
        db.UniqueConstraint("business_id", "name", name="uq_stores_business_name"),
        db.UniqueConstraint("business_id", "code", name="uq_stores_business_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(32), nullable=False)
    address = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    phone_country_code = db.Column(db.String(8), nullable=False, default="+234")
    country = db.Column(db.String(2), nullable=False, default="NG")  # ISO country code
    currency = db.Column(db.String(3), nullable=False, default="NGN")  # ISO currency code
    # stores and staff reference each other; the FK is added after both tables exist
    manager_staff_id = db.Column(
        db.Integer,
        db.ForeignKey("staff.id", use_alter=True, name="fk_stores_manager_staff"),
        nullable=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    business = db.relationship("Business", backref=db.backref("stores", lazy=True))

    def __repr__(self) -> str:
        return f"<Store id={self.id} code={self.code!r} business_id={self.business_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "code": self.code,
            "address": self.address,
            "phone": self.phone,
            "phone_country_code": self.phone_country_code,
            "country": self.country,
            "currency": self.currency,
            "manager_staff_id": self.manager_staff_id,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class StoreCounter(db.Model):
    """
    Per-store customer number sequence.

    One row per store, advanced only by an atomic UPDATE in the same
    transaction that consumes the number.
    """
    __tablename__ = "store_counters"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, unique=True)
    next_customer_number = db.Column(db.Integer, nullable=False, default=1)

    store = db.relationship("Store", backref=db.backref("counter", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "next_customer_number": self.next_customer_number,
        }
