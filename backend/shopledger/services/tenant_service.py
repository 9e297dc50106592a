"""
Tenant Service: Business scoping helpers

Every store-owned record is reached through a Store, and every Store belongs
to one Business. A store_id taken from client input must be validated
against the caller's business before it is used.

SECURITY INVARIANTS:
1. Every scoped request has g.business_id set (see decorators.require_business)
2. Store IDs from client input are validated against g.business_id
3. A store of another business is reported exactly like a missing store
4. Cross-tenant access attempts are logged as security events

USAGE:
    from shopledger.services.tenant_service import require_store_in_business

    store = require_store_in_business(store_id, g.business_id)
"""

from __future__ import annotations

from ..extensions import db
from ..models import Business, Store
from ..validation import NotFoundError, ValidationError
from .audit_service import log_security_event


def require_business(business_id: int) -> Business:
    business = db.session.get(Business, business_id)
    if not business:
        raise NotFoundError("Business not found")
    return business


def require_store_in_business(store_id: int | None, business_id: int) -> Store:
    """
    Validate that a store belongs to the specified business.

    Raises:
        ValidationError if no store_id was given
        NotFoundError if the store doesn't exist or belongs to another business
    """
    if store_id is None:
        raise ValidationError("Please select a store first.", field="store_id")

    store = db.session.get(Store, store_id)

    if not store:
        raise NotFoundError("Store not found")

    if store.business_id != business_id:
        log_security_event(
            "CROSS_TENANT_ACCESS_DENIED",
            business_id=business_id,
            store_id=store_id,
            reason=f"Store {store_id} belongs to business {store.business_id}",
        )
        raise NotFoundError("Store not found")  # Don't reveal it exists in another business

    return store


def get_business_store_ids(business_id: int) -> set[int]:
    """Set of store IDs for a business, for quick membership checks."""
    rows = db.session.query(Store.id).filter_by(business_id=business_id).all()
    return {row.id for row in rows}
