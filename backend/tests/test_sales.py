# Overview: Pytest coverage for the sale pipeline and profit/loss aggregation.

"""
Sales Tests

Every sale writes Order + Checkout + Transaction, decrements product stock
and folds the line into ProfitLoss, all in one transaction. These tests check
the happy path numbers and that a failed sale leaves no trace.
"""

import pytest

from shopledger.models import Checkout, Order, ProfitLoss, Transaction
from shopledger.services import customer_service, profit_loss_service, sales_service, staff_service
from shopledger.validation import InsufficientStockError, NotFoundError, ValidationError


def _sale_rows(session) -> tuple[int, int, int, int]:
    return (
        session.query(Order).count(),
        session.query(Checkout).count(),
        session.query(Transaction).count(),
        session.query(ProfitLoss).count(),
    )


class TestRecordSale:
    def test_widget_scenario(self, db_session, store_a, staff_a, customer_a, widget):
        transaction = sales_service.record_sale(store_a.id, widget.id, 3, staff_a.id, customer_a.id)

        order = transaction.checkout.order
        assert order.total_price_cents == 7500
        assert order.unit_price_cents == 2500
        assert order.unit_cost_cents == 1000
        assert transaction.checkout.total_price_cents == 7500
        assert transaction.checkout.staff_id == staff_a.id
        assert transaction.customer_id == customer_a.id
        assert widget.quantity == 97

        pl = profit_loss_service.get_profit_loss(store_a.id, widget.id)
        assert pl.total_quantity_sold == 3
        assert pl.total_revenue_cents == 7500
        assert pl.total_net_profit_cents == 4500
        assert pl.quantity_remaining == 97

        with pytest.raises(InsufficientStockError) as exc:
            sales_service.record_sale(store_a.id, widget.id, 200, staff_a.id, customer_a.id)
        assert exc.value.details["on_hand"] == 97
        assert exc.value.details["requested_quantity"] == 200
        assert widget.quantity == 97

    def test_insufficient_stock_changes_nothing(self, db_session, store_a, staff_a, customer_a, widget):
        with pytest.raises(InsufficientStockError):
            sales_service.record_sale(store_a.id, widget.id, 101, staff_a.id, customer_a.id)

        assert widget.quantity == 100
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_second_sale_accumulates(self, db_session, store_a, staff_a, customer_a, widget):
        sales_service.record_sale(store_a.id, widget.id, 3, staff_a.id, customer_a.id)
        sales_service.record_sale(store_a.id, widget.id, 2, staff_a.id, customer_a.id)

        pl = profit_loss_service.get_profit_loss(store_a.id, widget.id)
        assert pl.total_quantity_sold == 5
        assert pl.total_revenue_cents == 12500
        assert pl.total_net_profit_cents == 7500
        assert pl.quantity_remaining == 95
        assert db_session.query(ProfitLoss).count() == 1

    def test_price_change_keeps_order_snapshot(self, db_session, store_a, staff_a, customer_a, widget):
        from shopledger.services import inventory_service

        first = sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        inventory_service.update_item(store_a.id, widget.id, {"selling_price_cents": 3000})
        second = sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)

        assert first.checkout.order.unit_price_cents == 2500
        assert second.checkout.order.unit_price_cents == 3000
        pl = profit_loss_service.get_profit_loss(store_a.id, widget.id)
        assert pl.total_revenue_cents == 5500

    def test_service_never_depletes(self, db_session, store_a, staff_a, customer_a, repair):
        sales_service.record_sale(store_a.id, repair.id, 4, staff_a.id, customer_a.id)

        assert repair.quantity == 0
        pl = profit_loss_service.get_profit_loss(store_a.id, repair.id)
        assert pl.total_quantity_sold == 4
        assert pl.total_revenue_cents == 20000
        assert pl.total_net_profit_cents == 12000
        assert pl.quantity_remaining == 0

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "abc", None, True])
    def test_quantity_must_be_positive_integer(self, db_session, store_a, staff_a, customer_a, widget, quantity):
        with pytest.raises(ValidationError):
            sales_service.record_sale(store_a.id, widget.id, quantity, staff_a.id, customer_a.id)
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_unknown_payment_method(self, db_session, store_a, staff_a, customer_a, widget):
        with pytest.raises(ValidationError) as exc:
            sales_service.record_sale(
                store_a.id, widget.id, 1, staff_a.id, customer_a.id, payment_method="cheque",
            )
        assert exc.value.field == "payment_method"

    def test_payment_details_recorded(self, db_session, store_a, staff_a, customer_a, widget):
        transaction = sales_service.record_sale(
            store_a.id, widget.id, 1, staff_a.id, customer_a.id,
            payment_method="Flutterwave", payment_status="pending", payment_reference=" FLW-123 ",
        )
        assert transaction.checkout.payment_method == "flutterwave"
        assert transaction.checkout.payment_status == "pending"
        assert transaction.checkout.payment_reference == "FLW-123"

    def test_item_of_other_store_not_found(self, db_session, store_a2, staff_a, customer_a, widget):
        with pytest.raises(NotFoundError):
            sales_service.record_sale(store_a2.id, widget.id, 1, staff_a.id, customer_a.id)
        assert widget.quantity == 100

    def test_staff_of_other_store_not_found(self, db_session, store_a, store_a2, customer_a, widget):
        other_staff = staff_service.create_staff(store_a2.id, {
            "name": "Elsewhere", "staff_number": "S-100", "mobile_number": "1",
        })
        with pytest.raises(NotFoundError):
            sales_service.record_sale(store_a.id, widget.id, 1, other_staff.id, customer_a.id)
        assert widget.quantity == 100
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_customer_of_other_store_not_found(self, db_session, store_a, store_a2, staff_a, widget):
        other_customer = customer_service.create_customer(store_a2.id, {"name": "Elsewhere"})
        with pytest.raises(NotFoundError):
            sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, other_customer.id)
        assert widget.quantity == 100

    def test_archived_customer_cannot_buy(self, db_session, store_a, staff_a, customer_a, widget):
        customer_service.archive_customer(store_a.id, customer_a.id)
        with pytest.raises(ValidationError) as exc:
            sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        assert exc.value.field == "customer_id"
        assert widget.quantity == 100

    def test_archived_staff_cannot_sell(self, db_session, store_a, staff_a, customer_a, widget):
        staff_service.archive_staff(store_a.id, staff_a.id)
        with pytest.raises(ValidationError) as exc:
            sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        assert exc.value.field == "staff_id"

    @pytest.mark.parametrize("field", ["staff_id", "customer_id"])
    @pytest.mark.parametrize("bad_id", [None, [1], "abc", 1.5, True])
    def test_person_ids_must_be_integers(self, db_session, store_a, staff_a, customer_a, widget, field, bad_id):
        ids = {"staff_id": staff_a.id, "customer_id": customer_a.id, field: bad_id}
        with pytest.raises(ValidationError) as exc:
            sales_service.record_sale(store_a.id, widget.id, 1, ids["staff_id"], ids["customer_id"])
        assert exc.value.field == field
        assert widget.quantity == 100
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_digit_string_ids_accepted(self, db_session, store_a, staff_a, customer_a, widget):
        transaction = sales_service.record_sale(
            store_a.id, str(widget.id), 1, str(staff_a.id), f" {customer_a.id} ",
        )
        assert transaction.customer_id == customer_a.id
        assert transaction.checkout.staff_id == staff_a.id


class TestCheckoutCart:
    def test_cart_creates_one_triple_per_line(self, db_session, store_a, staff_a, customer_a, widget, repair):
        transactions = sales_service.checkout(
            store_a.id, staff_a.id, customer_a.id,
            [{"inventory_id": widget.id, "quantity": 2}, {"inventory_id": repair.id, "quantity": 1}],
            payment_method="transfer",
        )

        assert len(transactions) == 2
        assert _sale_rows(db_session) == (2, 2, 2, 2)
        assert {t.checkout.payment_method for t in transactions} == {"transfer"}
        assert widget.quantity == 98

    def test_failing_line_applies_nothing(self, db_session, store_a, staff_a, customer_a, widget, repair):
        with pytest.raises(InsufficientStockError):
            sales_service.checkout(
                store_a.id, staff_a.id, customer_a.id,
                [{"inventory_id": repair.id, "quantity": 1}, {"inventory_id": widget.id, "quantity": 500}],
            )

        assert widget.quantity == 100
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_same_item_checked_against_combined_quantity(self, db_session, store_a, staff_a, customer_a, widget):
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.checkout(
                store_a.id, staff_a.id, customer_a.id,
                [{"inventory_id": widget.id, "quantity": 60}, {"inventory_id": widget.id, "quantity": 60}],
            )
        assert exc.value.details["requested_quantity"] == 120
        assert widget.quantity == 100

    def test_missing_item_in_cart_applies_nothing(self, db_session, store_a, staff_a, customer_a, widget):
        with pytest.raises(NotFoundError):
            sales_service.checkout(
                store_a.id, staff_a.id, customer_a.id,
                [{"inventory_id": widget.id, "quantity": 1}, {"inventory_id": 99999, "quantity": 1}],
            )
        assert widget.quantity == 100
        assert _sale_rows(db_session) == (0, 0, 0, 0)

    def test_empty_cart_rejected(self, db_session, store_a, staff_a, customer_a):
        with pytest.raises(ValidationError):
            sales_service.checkout(store_a.id, staff_a.id, customer_a.id, [])


class TestProfitLossListing:
    def test_list_joined_with_inventory(self, db_session, store_a, store_a2, staff_a, customer_a, widget, repair):
        sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        sales_service.record_sale(store_a.id, repair.id, 1, staff_a.id, customer_a.id)

        rows = profit_loss_service.list_profit_loss(store_a.id)
        assert [r.inventory_item.name for r in rows] == ["Repair", "Widget"]
        data = rows[0].to_dict_with_inventory()
        assert data["inventory"]["type"] == "service"
        assert profit_loss_service.list_profit_loss(store_a2.id) == []
