# Overview: Pytest coverage for the HTTP API surface and its error mapping.

import io


class TestSystemAndBusinesses:
    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["checks"]["database"]["status"] == "healthy"

    def test_create_and_list_business(self, client, db_session):
        resp = client.post("/api/businesses", json={"name": "Chika Mart"})
        assert resp.status_code == 201
        business_id = resp.get_json()["id"]

        resp = client.get("/api/businesses")
        assert [b["id"] for b in resp.get_json()] == [business_id]

        resp = client.patch(f"/api/businesses/{business_id}", json={"phone": "8030000000"})
        assert resp.status_code == 200
        assert resp.get_json()["phone"] == "8030000000"

    def test_business_validation_error(self, client, db_session):
        resp = client.post("/api/businesses", json={"name": ""})
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "name"

    def test_missing_business_header(self, client, db_session):
        resp = client.get("/api/stores")
        assert resp.status_code == 400

    def test_unknown_business(self, client, db_session):
        resp = client.get("/api/stores", headers={"X-Business-Id": "424242"})
        assert resp.status_code == 404


class TestStoreRoutes:
    def test_create_store_and_conflict(self, client, db_session, headers_a):
        resp = client.post("/api/stores", json={"name": "Ikeja", "code": "ikj"}, headers=headers_a)
        assert resp.status_code == 201
        assert resp.get_json()["code"] == "IKJ"

        resp = client.post("/api/stores", json={"name": "Ikeja 2", "code": "IKJ"}, headers=headers_a)
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["fields"] == ["business_id", "code"]
        assert body["retryable"] is False

    def test_delete_restricted(self, client, db_session, store_a, customer_a, headers_a):
        resp = client.delete(f"/api/stores/{store_a.id}", headers=headers_a)
        assert resp.status_code == 409

    def test_list_only_own_stores(self, client, db_session, store_a, store_b, headers_a):
        resp = client.get("/api/stores", headers=headers_a)
        assert [s["id"] for s in resp.get_json()] == [store_a.id]


class TestCustomerRoutes:
    def test_lifecycle(self, client, db_session, store_a, headers_a):
        resp = client.post("/api/customers", json={"store_id": store_a.id, "name": "Obi"}, headers=headers_a)
        assert resp.status_code == 201
        customer = resp.get_json()
        assert customer["customer_number"] == "NYC-0001"

        url = f"/api/customers/{customer['id']}?store_id={store_a.id}"
        assert client.delete(url, headers=headers_a).get_json()["is_archived"] is True

        listed = client.get(f"/api/customers?store_id={store_a.id}", headers=headers_a).get_json()
        assert listed == []
        listed = client.get(
            f"/api/customers?store_id={store_a.id}&include_archived=true", headers=headers_a
        ).get_json()
        assert len(listed) == 1

        resp = client.post(f"/api/customers/{customer['id']}/restore?store_id={store_a.id}", headers=headers_a)
        assert resp.get_json()["is_archived"] is False

        resp = client.delete(f"/api/customers/{customer['id']}/permanent?store_id={store_a.id}", headers=headers_a)
        assert resp.status_code == 409

    def test_store_required(self, client, db_session, headers_a):
        resp = client.get("/api/customers", headers=headers_a)
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "store_id"

    def test_bulk_json(self, client, db_session, store_a, headers_a):
        resp = client.post(
            "/api/customers/bulk",
            json={"store_id": store_a.id, "data": [{"name": "A"}, {"name": "B"}, {}]},
            headers=headers_a,
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] == 2
        assert body["errors"][0]["row"] == 4


class TestInventoryAndSalesRoutes:
    def test_bulk_csv_upload(self, client, db_session, store_a, headers_a):
        data = {
            "store_id": str(store_a.id),
            "file": (io.BytesIO(b"name,type,cost_price,selling_price,quantity\nSoap,product,1,2,5\n"), "items.csv"),
        }
        resp = client.post("/api/inventory/bulk", data=data, headers=headers_a, content_type="multipart/form-data")
        assert resp.status_code == 200
        assert resp.get_json()["success"] == 1

        items = client.get(f"/api/inventory?store_id={store_a.id}&low_stock=true", headers=headers_a).get_json()
        assert [i["name"] for i in items] == ["Soap"]

    def test_sale_and_insufficient_stock(self, client, db_session, store_a, staff_a, customer_a, widget, headers_a):
        payload = {
            "store_id": store_a.id,
            "inventory_id": widget.id,
            "quantity": 3,
            "staff_id": staff_a.id,
            "customer_id": customer_a.id,
        }
        resp = client.post("/api/sales", json=payload, headers=headers_a)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["checkout"]["order"]["total_price_cents"] == 7500
        assert body["inventory"]["quantity"] == 97

        resp = client.post("/api/sales", json={**payload, "quantity": 200}, headers=headers_a)
        assert resp.status_code == 400
        details = resp.get_json()["details"]
        assert details["on_hand"] == 97
        assert details["requested_quantity"] == 200

        resp = client.get(f"/api/profit-loss?store_id={store_a.id}", headers=headers_a)
        row = resp.get_json()[0]
        assert row["total_net_profit_cents"] == 4500
        assert row["inventory"]["name"] == "Widget"

    def test_sale_with_malformed_staff_id(self, client, db_session, store_a, customer_a, widget, headers_a):
        payload = {"store_id": store_a.id, "inventory_id": widget.id, "quantity": 1, "customer_id": customer_a.id}

        resp = client.post("/api/sales", json={**payload, "staff_id": [1]}, headers=headers_a)
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "staff_id"

        resp = client.post("/api/sales", json=payload, headers=headers_a)
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "staff_id"

    def test_checkout_route(self, client, db_session, store_a, staff_a, customer_a, widget, repair, headers_a):
        resp = client.post("/api/sales/checkout", json={
            "store_id": store_a.id,
            "staff_id": staff_a.id,
            "customer_id": customer_a.id,
            "payment_method": "cash",
            "items": [{"inventory_id": widget.id, "quantity": 1}, {"inventory_id": repair.id, "quantity": 2}],
        }, headers=headers_a)
        assert resp.status_code == 201
        body = resp.get_json()
        assert len(body["transactions"]) == 2
        assert body["total_price_cents"] == 2500 + 10000

    def test_reports_and_exports(self, client, db_session, store_a, staff_a, customer_a, widget, headers_a):
        client.post("/api/sales", json={
            "store_id": store_a.id, "inventory_id": widget.id, "quantity": 1,
            "staff_id": staff_a.id, "customer_id": customer_a.id,
        }, headers=headers_a)

        stats = client.get(f"/api/dashboard/stats?store_id={store_a.id}", headers=headers_a).get_json()
        assert stats["total_transactions"] == 1

        trends = client.get(f"/api/charts/sales-trends?store_id={store_a.id}", headers=headers_a).get_json()
        assert trends[0]["revenue_cents"] == 2500

        by_type = client.get(f"/api/charts/revenue-by-type?store_id={store_a.id}", headers=headers_a).get_json()
        assert by_type[0]["name"] == "Widget"

        history = client.get(f"/api/transactions?store_id={store_a.id}", headers=headers_a).get_json()
        assert history[0]["customer"]["name"] == "Amaka Eze"

        resp = client.get(f"/api/transactions/export?store_id={store_a.id}", headers=headers_a)
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "Amaka Eze" in resp.get_data(as_text=True)

        resp = client.get(f"/api/profit-loss/export?store_id={store_a.id}", headers=headers_a)
        assert resp.get_data(as_text=True).splitlines()[1].startswith("Widget,product,1,99")
