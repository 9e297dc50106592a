# Overview: Pytest coverage for business, store, customer, staff and inventory records.

import pytest

from shopledger.models import Store, StoreCounter
from shopledger.services import (
    business_service,
    customer_service,
    inventory_service,
    sales_service,
    staff_service,
    store_service,
)
from shopledger.validation import ConflictError, NotFoundError, ValidationError


class TestBusinessAndStore:
    def test_business_defaults(self, db_session, business_a):
        assert business_a.email == "ops@ada.ng"
        assert business_a.phone_country_code == "+234"

    def test_business_name_required(self, db_session):
        with pytest.raises(ValidationError) as exc:
            business_service.create_business({"name": "   "})
        assert exc.value.field == "name"

    def test_store_code_upper_cased_with_defaults(self, db_session, store_a):
        assert store_a.code == "NYC"
        assert store_a.country == "NG"
        assert store_a.currency == "NGN"
        assert db_session.query(StoreCounter).filter_by(store_id=store_a.id).one().next_customer_number == 1

    def test_store_code_unique_within_business(self, db_session, business_a, store_a):
        with pytest.raises(ConflictError) as exc:
            store_service.create_store(business_a.id, {"name": "Other", "code": " NYC "})
        assert exc.value.fields == ("business_id", "code")

    def test_store_name_unique_within_business(self, db_session, business_a, store_a):
        with pytest.raises(ConflictError) as exc:
            store_service.create_store(business_a.id, {"name": "New York", "code": "NY2"})
        assert exc.value.fields == ("business_id", "name")

    def test_same_code_in_other_business(self, db_session, business_b, store_a):
        store = store_service.create_store(business_b.id, {"name": "New York", "code": "NYC"})
        assert store.business_id == business_b.id

    def test_unknown_field_rejected(self, db_session, business_a):
        with pytest.raises(ValidationError) as exc:
            store_service.create_store(business_a.id, {"name": "X", "code": "X", "business_id": 5})
        assert exc.value.field == "business_id"

    def test_manager_must_be_store_staff(self, db_session, business_a, store_a, store_a2, staff_a):
        store = store_service.update_store(business_a.id, store_a.id, {"manager_staff_id": staff_a.id})
        assert store.manager_staff_id == staff_a.id
        with pytest.raises(NotFoundError):
            store_service.update_store(business_a.id, store_a2.id, {"manager_staff_id": staff_a.id})

    @pytest.mark.parametrize("raw, code", [
        ("N Y", "NY"),
        (" lag-01 ", "LAG01"),
        ("abcdefghijklmn", "ABCDEFGHIJ"),
    ])
    def test_store_code_keeps_letters_and_digits(self, db_session, business_a, raw, code):
        store = store_service.create_store(business_a.id, {"name": "Ikeja", "code": raw})
        assert store.code == code
        assert customer_service.create_customer(store.id, {"name": "Ada"}).customer_number == f"{code}-0001"

    def test_store_code_without_letters_or_digits(self, db_session, business_a, store_a):
        with pytest.raises(ValidationError) as exc:
            store_service.create_store(business_a.id, {"name": "Ikeja", "code": "--"})
        assert exc.value.field == "code"
        with pytest.raises(ValidationError):
            store_service.update_store(business_a.id, store_a.id, {"code": " . "})

    def test_store_code_sanitized_on_update(self, db_session, business_a, store_a):
        store = store_service.update_store(business_a.id, store_a.id, {"code": "ny-c 2"})
        assert store.code == "NYC2"

    def test_manager_reference_is_a_foreign_key(self):
        targets = {fk.target_fullname for fk in Store.__table__.c.manager_staff_id.foreign_keys}
        assert targets == {"staff.id"}

    def test_deleting_manager_clears_store_reference(self, db_session, business_a, store_a, staff_a):
        store_service.update_store(business_a.id, store_a.id, {"manager_staff_id": staff_a.id})
        staff_service.archive_staff(store_a.id, staff_a.id)
        staff_service.delete_staff(store_a.id, staff_a.id)
        assert db_session.get(Store, store_a.id).manager_staff_id is None

    def test_delete_empty_store(self, db_session, business_a, store_a2):
        store_id = store_a2.id
        store_service.delete_store(business_a.id, store_id)
        assert db_session.get(Store, store_id) is None
        assert db_session.query(StoreCounter).filter_by(store_id=store_id).count() == 0

    def test_delete_store_with_data_is_restricted(self, db_session, business_a, store_a, customer_a):
        with pytest.raises(ConflictError):
            store_service.delete_store(business_a.id, store_a.id)
        assert db_session.get(Store, store_a.id) is not None

    def test_store_of_other_business_not_found(self, db_session, business_a, store_b):
        with pytest.raises(NotFoundError):
            store_service.get_store(business_a.id, store_b.id)


class TestCustomers:
    def test_duplicate_number_in_store_conflicts(self, db_session, store_a):
        customer_service.create_customer(store_a.id, {"name": "A", "customer_number": "C-1"})
        with pytest.raises(ConflictError) as exc:
            customer_service.create_customer(store_a.id, {"name": "B", "customer_number": "C-1"})
        assert exc.value.fields == ("store_id", "customer_number")

    def test_same_number_in_two_stores(self, db_session, store_a, store_a2):
        customer_service.create_customer(store_a.id, {"name": "A", "customer_number": "C-1"})
        other = customer_service.create_customer(store_a2.id, {"name": "B", "customer_number": "C-1"})
        assert other.store_id == store_a2.id

    def test_archive_hides_but_keeps_record(self, db_session, store_a, customer_a):
        customer_service.archive_customer(store_a.id, customer_a.id)

        assert customer_service.list_customers(store_a.id) == []
        assert len(customer_service.list_customers(store_a.id, include_archived=True)) == 1
        fetched = customer_service.get_customer(store_a.id, customer_a.id)
        assert fetched.is_archived is True

    def test_archived_number_is_not_reused(self, db_session, store_a, customer_a):
        number = customer_a.customer_number
        customer_service.archive_customer(store_a.id, customer_a.id)
        with pytest.raises(ConflictError):
            customer_service.create_customer(store_a.id, {"name": "New", "customer_number": number})

    def test_restore(self, db_session, store_a, customer_a):
        customer_service.archive_customer(store_a.id, customer_a.id)
        restored = customer_service.restore_customer(store_a.id, customer_a.id)
        assert restored.is_archived is False
        assert len(customer_service.list_customers(store_a.id)) == 1

    def test_permanent_delete_requires_archive(self, db_session, store_a, customer_a):
        with pytest.raises(ConflictError):
            customer_service.delete_customer(store_a.id, customer_a.id)

        customer_service.archive_customer(store_a.id, customer_a.id)
        customer_service.delete_customer(store_a.id, customer_a.id)
        with pytest.raises(NotFoundError):
            customer_service.get_customer(store_a.id, customer_a.id)

    def test_permanent_delete_blocked_by_history(self, db_session, store_a, staff_a, customer_a, widget):
        sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        customer_service.archive_customer(store_a.id, customer_a.id)
        with pytest.raises(ConflictError):
            customer_service.delete_customer(store_a.id, customer_a.id)

    def test_update_rejects_blank_number(self, db_session, store_a, customer_a):
        with pytest.raises(ValidationError):
            customer_service.update_customer(store_a.id, customer_a.id, {"customer_number": " "})

    def test_customer_of_other_store_not_found(self, db_session, store_a2, customer_a):
        with pytest.raises(NotFoundError):
            customer_service.get_customer(store_a2.id, customer_a.id)


class TestStaff:
    def test_defaults_and_role(self, db_session, store_a):
        staff = staff_service.create_staff(store_a.id, {
            "name": "Tunde",
            "staff_number": "S-9",
            "mobile_number": "8030000009",
            "signed_contract": "true",
        })
        assert staff.role == "regular"
        assert staff.signed_contract is True
        assert staff.country_code == "+234"

    def test_staff_number_required(self, db_session, store_a):
        with pytest.raises(ValidationError) as exc:
            staff_service.create_staff(store_a.id, {"name": "Tunde", "mobile_number": "1"})
        assert exc.value.field == "staff_number"

    def test_invalid_role(self, db_session, store_a):
        with pytest.raises(ValidationError) as exc:
            staff_service.create_staff(store_a.id, {
                "name": "Tunde", "staff_number": "S-9", "mobile_number": "1", "role": "owner",
            })
        assert exc.value.field == "role"

    def test_negative_pay_rejected(self, db_session, store_a):
        with pytest.raises(ValidationError):
            staff_service.create_staff(store_a.id, {
                "name": "Tunde", "staff_number": "S-9", "mobile_number": "1", "pay_per_month_cents": -1,
            })

    def test_duplicate_staff_number(self, db_session, store_a, staff_a):
        with pytest.raises(ConflictError) as exc:
            staff_service.create_staff(store_a.id, {
                "name": "Other", "staff_number": "S-001", "mobile_number": "1",
            })
        assert exc.value.fields == ("store_id", "staff_number")

    def test_permanent_delete_blocked_by_checkouts(self, db_session, store_a, staff_a, customer_a, widget):
        sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        staff_service.archive_staff(store_a.id, staff_a.id)
        with pytest.raises(ConflictError):
            staff_service.delete_staff(store_a.id, staff_a.id)


class TestInventory:
    def test_duplicate_name_in_store_conflicts(self, db_session, store_a, widget):
        with pytest.raises(ConflictError) as exc:
            inventory_service.create_item(store_a.id, {
                "name": "Widget", "type": "product", "cost_price_cents": 1, "selling_price_cents": 2,
            })
        assert exc.value.fields == ("store_id", "name")

    def test_same_name_in_two_stores(self, db_session, store_a2, widget):
        item = inventory_service.create_item(store_a2.id, {
            "name": "Widget", "type": "product", "cost_price_cents": 1, "selling_price_cents": 2,
        })
        assert item.store_id == store_a2.id

    def test_type_is_trimmed_and_lower_cased(self, db_session, store_a):
        item = inventory_service.create_item(store_a.id, {
            "name": "Gadget", "type": " Product ", "cost_price_cents": 1, "selling_price_cents": 2,
        })
        assert item.type == "product"

    def test_unknown_type_rejected(self, db_session, store_a):
        with pytest.raises(ValidationError) as exc:
            inventory_service.create_item(store_a.id, {
                "name": "Gadget", "type": "bundle", "cost_price_cents": 1, "selling_price_cents": 2,
            })
        assert exc.value.field == "type"

    def test_service_quantity_forced_to_zero(self, db_session, store_a):
        item = inventory_service.create_item(store_a.id, {
            "name": "Consult", "type": "service", "cost_price_cents": 0,
            "selling_price_cents": 100, "quantity": 40,
        })
        assert item.quantity == 0

    def test_float_price_rejected(self, db_session, store_a):
        with pytest.raises(ValidationError):
            inventory_service.create_item(store_a.id, {
                "name": "Gadget", "type": "product", "cost_price_cents": 12.5, "selling_price_cents": 2,
            })

    def test_low_stock_filter(self, db_session, store_a, widget, repair):
        inventory_service.update_item(store_a.id, widget.id, {"quantity": 5})
        low = inventory_service.list_items(store_a.id, low_stock=True)
        assert [item.name for item in low] == ["Widget"]
        assert [i.name for i in inventory_service.list_items(store_a.id, type="service")] == ["Repair"]

    def test_delete_blocked_by_sales(self, db_session, store_a, staff_a, customer_a, widget, repair):
        sales_service.record_sale(store_a.id, widget.id, 1, staff_a.id, customer_a.id)
        with pytest.raises(ConflictError):
            inventory_service.delete_item(store_a.id, widget.id)

        inventory_service.delete_item(store_a.id, repair.id)
        assert [i.name for i in inventory_service.list_items(store_a.id)] == ["Widget"]
