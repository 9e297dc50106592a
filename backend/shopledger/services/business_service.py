# Overview: Service-layer operations for businesses (tenant roots).

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Business
from ..validation import ModelValidationPolicy, NotFoundError, validate_payload
from .audit_service import log_modification
from .concurrency import run_with_retry


BUSINESS_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address", "phone", "phone_country_code", "email"},
    required_on_create={"name"},
)


def create_business(payload: dict) -> Business:
    patch = validate_payload(model=Business, payload=payload, policy=BUSINESS_POLICY, partial=False)
    if patch.get("email"):
        patch["email"] = patch["email"].lower()

    def _op():
        business = Business(**patch)
        if not business.phone_country_code:
            business.phone_country_code = current_app.config["DEFAULT_PHONE_COUNTRY_CODE"]

        db.session.add(business)
        db.session.commit()
        return business

    business = run_with_retry(_op)
    log_modification("CREATE", "business", resource_id=business.id)
    return business


def get_business(business_id: int) -> Business:
    business = db.session.get(Business, business_id)
    if not business:
        raise NotFoundError("Business not found")
    return business


def list_businesses() -> list[Business]:
    return db.session.query(Business).order_by(Business.name.asc(), Business.id.asc()).all()


def update_business(business_id: int, payload: dict) -> Business:
    patch = validate_payload(model=Business, payload=payload, policy=BUSINESS_POLICY, partial=True)
    if patch.get("email"):
        patch["email"] = patch["email"].lower()

    def _op():
        business = get_business(business_id)
        for key, value in patch.items():
            setattr(business, key, value)
        db.session.commit()
        return business

    business = run_with_retry(_op)
    log_modification("UPDATE", "business", resource_id=business.id)
    return business
