# Overview: Per-store customer number allocation.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Store, StoreCounter
from ..validation import ConflictError, NotFoundError
from .concurrency import begin_write, run_with_retry


def allocate_customer_number(store_id: int) -> int:
    """
    Allocate the next customer number inside the caller's transaction.

    Atomic compare-and-increment: the UPDATE both claims the value and
    row-locks the counter until the caller commits, so concurrent callers
    for the same store serialize and never receive the same number.
    The caller owns the commit.
    """
    store = db.session.get(Store, store_id)
    if not store:
        raise NotFoundError("Store not found")

    stmt = (
        update(StoreCounter)
        .where(StoreCounter.store_id == store_id)
        .values(next_customer_number=StoreCounter.next_customer_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if not result.rowcount:
        # Store predates its counter row; first use starts the sequence at 1
        try:
            with db.session.begin_nested():
                db.session.add(StoreCounter(store_id=store_id, next_customer_number=2))
            return 1
        except IntegrityError:
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise

    current = (
        db.session.query(StoreCounter.next_customer_number)
        .filter_by(store_id=store_id)
        .scalar()
    )
    return current - 1


def format_customer_number(store: Store, number: int, pad: int = 4) -> str:
    return f"{store.code}-{number:0{pad}d}"


# Upper bound on hand-entered numbers skipped by one allocation
MAX_TAKEN_NUMBERS_SKIPPED = 1000


def allocate_free_customer_number(store: Store) -> tuple[int, str]:
    """
    Allocate the next formatted number that no customer in the store holds.

    Numbers typed in by hand can match a future counter value. Those values
    are consumed and skipped inside the caller's transaction.
    """
    for _ in range(MAX_TAKEN_NUMBERS_SKIPPED):
        sequence = allocate_customer_number(store.id)
        number = format_customer_number(store, sequence)
        taken = (
            db.session.query(Customer.id)
            .filter_by(store_id=store.id, customer_number=number)
            .first()
        )
        if taken is None:
            return sequence, number
    raise ConflictError(
        "Could not find a free customer number for this store.",
        fields=("store_id", "customer_number"),
    )


def next_customer_number(store_id: int) -> int:
    """Allocate and commit the next customer number for a store."""
    def _op() -> int:
        begin_write()
        number = allocate_customer_number(store_id)
        db.session.commit()
        return number

    return run_with_retry(_op)


def generate_customer_number(store: Store) -> dict:
    """Reserve a number for a customer form; numbers already held are skipped."""
    def _op() -> tuple[int, str]:
        begin_write()
        allocated = allocate_free_customer_number(store)
        db.session.commit()
        return allocated

    sequence, number = run_with_retry(_op)
    return {"customer_number": number, "sequence": sequence}


def peek_next_customer_number(store_id: int) -> int:
    counter = db.session.query(StoreCounter).filter_by(store_id=store_id).first()
    return counter.next_customer_number if counter else 1
