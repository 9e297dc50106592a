from __future__ import annotations

import csv
import io

from shopledger.services.profit_loss_service import list_profit_loss
from shopledger.services.reporting_service import list_transactions
from shopledger.time_utils import to_utc_z


def _cents(value: int | None) -> str:
    return f"{(value or 0) / 100:.2f}"


def _write(header: list[str], rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def profit_loss_csv(store_id: int) -> str:
    rows = (
        [
            pl.inventory_item.name,
            pl.inventory_item.type,
            pl.total_quantity_sold,
            pl.quantity_remaining,
            _cents(pl.total_revenue_cents),
            _cents(pl.total_net_profit_cents),
        ]
        for pl in list_profit_loss(store_id)
    )
    return _write(
        ["Item", "Type", "Quantity Sold", "Quantity Remaining", "Revenue", "Net Profit"],
        rows,
    )


def transactions_csv(store_id: int, start: str | None = None, end: str | None = None) -> str:
    rows = (
        [
            t.id,
            to_utc_z(t.transaction_date),
            t.customer.customer_number,
            t.customer.name,
            t.inventory_item.name,
            t.checkout.order.quantity,
            _cents(t.checkout.order.unit_price_cents),
            _cents(t.checkout.total_price_cents),
            t.checkout.payment_method,
            t.checkout.payment_status,
            t.checkout.staff.name,
        ]
        for t in list_transactions(store_id, start=start, end=end)
    )
    return _write(
        [
            "Transaction ID", "Date", "Customer Number", "Customer", "Item", "Quantity",
            "Unit Price", "Total", "Payment Method", "Payment Status", "Staff",
        ],
        rows,
    )
