# Overview: Audit trail of data modifications, written to the "shopledger.audit" logger.

from __future__ import annotations

import logging

audit_logger = logging.getLogger("shopledger.audit")


def format_entry(
    action: str,
    resource: str,
    *,
    success: bool,
    resource_id: int | None = None,
    store_id: int | None = None,
    error: str | None = None,
) -> str:
    parts = [
        f"[{'SUCCESS' if success else 'FAILURE'}]",
        f"[{action}]",
        f"[{resource}]",
    ]
    if resource_id is not None:
        parts.append(f"[id:{resource_id}]")
    if store_id is not None:
        parts.append(f"[store:{store_id}]")
    if error:
        parts.append(f"[error:{error}]")
    return " ".join(parts)


def log_modification(
    action: str,
    resource: str,
    *,
    resource_id: int | None = None,
    store_id: int | None = None,
    success: bool = True,
    error: str | None = None,
) -> None:
    """
    Record one create/update/archive/delete/sale event.

    Failures go out at WARNING so they surface with default log levels.
    """
    line = format_entry(
        action,
        resource,
        success=success,
        resource_id=resource_id,
        store_id=store_id,
        error=error,
    )
    if success:
        audit_logger.info("AUDIT: %s", line)
    else:
        audit_logger.warning("AUDIT: %s", line)


def log_security_event(event: str, *, business_id: int | None = None, store_id: int | None = None, reason: str | None = None) -> None:
    audit_logger.warning(
        "SECURITY: [%s] [business:%s] [store:%s] %s",
        event,
        business_id,
        store_id,
        reason or "",
    )
