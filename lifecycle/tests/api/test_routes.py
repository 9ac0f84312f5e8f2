"""
HTTP tests: routes, status codes for each error type, and correlation ids.
"""

from fastapi.testclient import TestClient

from lifecycle.core.clock import FixedClock
from lifecycle.tests.conftest import day

API = "/api/v1"


def register_book(client: TestClient, isbn: str = "9780306406157") -> dict:
    response = client.post(
        f"{API}/books", json={"isbn": isbn, "title": "SICP", "author": "Abelson"}
    )
    assert response.status_code == 201
    return response.json()


def register_member(client: TestClient, email: str = "ada@example.com") -> dict:
    response = client.post(
        f"{API}/members", json={"email": email, "full_name": "Ada Lovelace"}
    )
    assert response.status_code == 201
    return response.json()


class TestLibraryRoutes:
    def test_loan_and_return_flow(self, client: TestClient, clock: FixedClock):
        book = register_book(client)
        member = register_member(client)

        response = client.post(
            f"{API}/loans", json={"book_id": book["id"], "member_id": member["id"]}
        )
        assert response.status_code == 201
        loan = response.json()
        assert loan["status"] == "ACTIVE"

        clock.set(day(20))
        overdue = client.get(f"{API}/loans/overdue").json()
        assert [(o["id"], o["status"]) for o in overdue] == [(loan["id"], "OVERDUE")]

        response = client.post(f"{API}/loans/{loan['id']}/return")
        assert response.status_code == 200
        assert response.json()["days_overdue"] == 6

        member_view = client.get(f"{API}/members/{member['id']}").json()
        assert member_view["has_active_penalty"] is True
        assert member_view["active_loans"] == 0

        loans = client.get(
            f"{API}/members/{member['id']}/loans", params={"active_only": True}
        ).json()
        assert loans == []

    def test_second_return_is_409(self, client: TestClient):
        book = register_book(client)
        member = register_member(client)
        loan = client.post(
            f"{API}/loans", json={"book_id": book["id"], "member_id": member["id"]}
        ).json()
        client.post(f"{API}/loans/{loan['id']}/return")

        response = client.post(f"{API}/loans/{loan['id']}/return")

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["type"] == "invalid_transition"
        assert detail["details"]["current_status"] == "RETURNED"

    def test_invalid_isbn_is_400(self, client: TestClient):
        response = client.post(
            f"{API}/books", json={"isbn": "12345", "title": "x", "author": "y"}
        )
        assert response.status_code == 400
        assert response.json()["detail"]["type"] == "validation"

    def test_duplicate_isbn_is_409(self, client: TestClient):
        register_book(client)
        response = client.post(
            f"{API}/books",
            json={"isbn": "978-0-306-40615-7", "title": "Again", "author": "y"},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["type"] == "conflict"

    def test_unknown_member_is_404(self, client: TestClient):
        response = client.get(f"{API}/members/member-404")
        assert response.status_code == 404
        assert response.json()["detail"]["details"]["entity_type"] == "Member"

    def test_correlation_id_is_echoed(self, client: TestClient):
        response = client.get(
            f"{API}/members/member-404", headers={"X-Correlation-ID": "req-123"}
        )
        assert response.headers["X-Correlation-ID"] == "req-123"
        assert response.json()["correlation_id"] == "req-123"


class TestSalesRoutes:
    def _place(self, client: TestClient) -> dict:
        response = client.post(
            f"{API}/orders/",
            json={
                "customer_id": "cust-1",
                "customer_email": "buyer@example.com",
                "items": [
                    {"product_id": "pen", "product_name": "Pen", "quantity": 2, "unit_price": 1000},
                    {"product_id": "ink", "product_name": "Ink", "quantity": 1, "unit_price": 500},
                ],
            },
        )
        assert response.status_code == 201
        return response.json()

    def test_place_and_pay(self, client: TestClient):
        order = self._place(client)
        assert order["total"]["amount"] == 2500

        response = client.post(
            f"{API}/orders/{order['id']}/pay", json={"payment_method": "creditcard"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["order"]["status"] == "PAID"

        again = client.post(
            f"{API}/orders/{order['id']}/pay", json={"payment_method": "creditcard"}
        )
        assert again.status_code == 409

    def test_unsupported_payment_method_is_400(self, client: TestClient):
        order = self._place(client)
        response = client.post(
            f"{API}/orders/{order['id']}/pay", json={"payment_method": "cheque"}
        )
        assert response.status_code == 400
        assert client.get(f"{API}/orders/{order['id']}").json()["status"] == "PENDING"

    def test_cancel(self, client: TestClient):
        order = self._place(client)
        response = client.post(
            f"{API}/orders/{order['id']}/cancel", json={"reason": "changed mind"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

    def test_fees_and_customer_orders(self, client: TestClient):
        self._place(client)
        fees = client.get(f"{API}/orders/fees", params={"amount": 10000}).json()
        assert fees[0]["fee"]["amount"] == 100
        orders = client.get(f"{API}/orders/customer/cust-1").json()
        assert len(orders) == 1

    def test_unknown_order_is_404(self, client: TestClient):
        assert client.get(f"{API}/orders/order-404").status_code == 404

    def test_ship_unpaid_order_is_409(self, client: TestClient):
        order = self._place(client)
        response = client.post(
            f"{API}/orders/{order['id']}/ship",
            json={"tracking_number": "TRK-1", "carrier": "DHL"},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["details"]["current_status"] == "PENDING"

    def test_ship_and_deliver(self, client: TestClient):
        order = self._place(client)
        client.post(f"{API}/orders/{order['id']}/pay", json={"payment_method": "paypal"})

        shipped = client.post(
            f"{API}/orders/{order['id']}/ship",
            json={"tracking_number": "TRK-1", "carrier": "DHL"},
        )
        delivered = client.post(f"{API}/orders/{order['id']}/deliver")

        assert shipped.json()["tracking_number"] == "TRK-1"
        assert delivered.status_code == 200
        assert delivered.json()["status"] == "DELIVERED"


class TestProductRoutes:
    def _add(self, client: TestClient, sku: str = "ABC-12345", stock: int = 20) -> dict:
        response = client.post(
            f"{API}/products",
            json={"sku": sku, "name": "Fountain pen", "price": 2500, "initial_stock": stock},
        )
        assert response.status_code == 201
        return response.json()

    def test_duplicate_sku_is_409(self, client: TestClient):
        self._add(client)
        response = client.post(
            f"{API}/products", json={"sku": "abc-12345", "name": "Copy", "price": 100}
        )
        assert response.status_code == 409
        assert response.json()["detail"]["details"]["field"] == "sku"

    def test_malformed_payload_is_400(self, client: TestClient):
        response = client.post(f"{API}/products", json={"name": "No SKU", "price": 100})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["type"] == "validation"
        assert detail["details"]["field"] == "sku"

    def test_stock_flow(self, client: TestClient):
        product = self._add(client, stock=3)
        url = f"{API}/products/{product['id']}"

        received = client.post(f"{url}/stock", json={"quantity": 10, "reason": "delivery"})
        assert received.json()["stock"] == 13
        too_many = client.post(f"{url}/stock", json={"quantity": -20, "reason": "sale"})
        assert too_many.status_code == 409
        zero = client.post(f"{url}/stock", json={"quantity": 0, "reason": "noop"})
        assert zero.status_code == 400

        price = client.put(f"{url}/price", json={"price": 3000})
        assert price.json()["price"]["amount"] == 3000
        assert client.get(f"{API}/products/low-stock").json() == []
        assert client.get(f"{API}/products/product-404").status_code == 404


class TestTaskRoutes:
    def test_task_flow(self, client: TestClient):
        tag = client.post(f"{API}/tags", json={"name": "urgent"}).json()
        task = client.post(
            f"{API}/tasks", json={"project_id": "proj-1", "title": "Ship", "priority": "HIGH"}
        ).json()

        response = client.put(f"{API}/tasks/{task['id']}/tags/{tag['id']}")
        assert response.json()["tag_ids"] == [tag["id"]]

        response = client.post(f"{API}/tasks/{task['id']}/status", json={"status": "DONE"})
        assert response.status_code == 409

        client.post(f"{API}/tasks/{task['id']}/status", json={"status": "IN_PROGRESS"})
        listed = client.get(
            f"{API}/projects/proj-1/tasks", params={"status": "IN_PROGRESS"}
        ).json()
        assert [t["id"] for t in listed] == [task["id"]]

        response = client.patch(f"{API}/tasks/{task['id']}", json={"title": "Ship it"})
        assert response.json()["title"] == "Ship it"

    def test_duplicate_tag_is_409(self, client: TestClient):
        client.post(f"{API}/tags", json={"name": "urgent"})
        response = client.post(f"{API}/tags", json={"name": "URGENT"})
        assert response.status_code == 409

    def test_delete_tag(self, client: TestClient):
        tag = client.post(f"{API}/tags", json={"name": "old"}).json()
        task = client.post(
            f"{API}/tasks",
            json={"project_id": "proj-1", "title": "Tagged", "tag_ids": [tag["id"]]},
        ).json()

        assert client.delete(f"{API}/tags/{tag['id']}").status_code == 204
        assert client.get(f"{API}/tags").json() == []
        assert client.get(f"{API}/tasks/{task['id']}").json()["tag_ids"] == []
        assert client.delete(f"{API}/tags/{tag['id']}").status_code == 404

    def test_update_tag(self, client: TestClient):
        tag = client.post(f"{API}/tags", json={"name": "docs"}).json()
        response = client.patch(f"{API}/tags/{tag['id']}", json={"color": "#abcdef"})
        assert response.json()["color"] == "#ABCDEF"
