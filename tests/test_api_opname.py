"""Tests for the stock take and purchase order endpoints."""


class TestOpnameEndpoints:

    def test_full_counting_cycle(self, client, staff_headers, sample_items):
        session = client.post("/api/v1/opname/sessions", json={"title": "March"}, headers=staff_headers).json()
        assert session["status"] == "OPEN"
        assert session["total_items"] == 3
        assert session["creator"] == "Sam Staff"

        items = client.get(
            f"/api/v1/opname/sessions/{session['id']}/items", params={"search": "MAT-001"}, headers=staff_headers
        ).json()
        assert items["total"] == 1
        line = items["items"][0]

        counted = client.put(f"/api/v1/opname/items/{line['id']}", json={"physical_qty": 9}, headers=staff_headers)
        assert counted.status_code == 200
        assert counted.json()["variance"] == -1

        stats = client.get(f"/api/v1/opname/sessions/{session['id']}/stats", headers=staff_headers).json()
        assert stats == {"total": 3, "counted": 1, "matched": 0, "variance": 1}

        closed = client.post(f"/api/v1/opname/sessions/{session['id']}/finalize", headers=staff_headers)
        assert closed.status_code == 200
        assert closed.json()["status"] == "COMPLETED"

        item = client.get("/api/v1/inventory/MAT-001:::WH01", headers=staff_headers).json()
        assert item["quantity"] == 9
        assert item["history"][0]["action"] == "OPNAME"

        again = client.put(f"/api/v1/opname/items/{line['id']}", json={"physical_qty": 1}, headers=staff_headers)
        assert again.status_code == 409

    def test_read_only_user_has_no_access(self, client, user_headers):
        assert client.get("/api/v1/opname/sessions", headers=user_headers).status_code == 403

    def test_unknown_session(self, client, staff_headers):
        assert client.get("/api/v1/opname/sessions/42", headers=staff_headers).status_code == 404


class TestPurchaseEndpoints:

    def test_order_and_receive(self, client, staff_headers, sample_items):
        created = client.post("/api/v1/purchases", json={
            "material_no": "MAT-002", "sloc": "WH01", "quantity": 10, "supplier": "SKF"
        }, headers=staff_headers)

        assert created.status_code == 201
        order = created.json()
        assert order["status"] == "ORDERED"
        assert order["item_id"] == "MAT-002:::WH01"

        received = client.patch(
            f"/api/v1/purchases/{order['id']}/status", json={"status": "RECEIVED"}, headers=staff_headers
        )
        assert received.status_code == 200
        assert received.json()["status"] == "RECEIVED"

        cancelled = client.patch(
            f"/api/v1/purchases/{order['id']}/status", json={"status": "CANCELLED"}, headers=staff_headers
        )
        assert cancelled.status_code == 409

        listed = client.get("/api/v1/purchases", params={"status": "RECEIVED"}, headers=staff_headers).json()
        assert [o["id"] for o in listed] == [order["id"]]

    def test_read_only_user_has_no_access(self, client, user_headers):
        assert client.get("/api/v1/purchases", headers=user_headers).status_code == 403
