import unittest
from decimal import Decimal

from fastapi.testclient import TestClient
from ledger_fixtures import LedgerTestCase

from orderledger.dependencies import get_db, require_auth
from orderledger.main import app


class OrdersApiTest(LedgerTestCase):
    def setUp(self):
        super().setUp()

        def override_get_db():
            yield self.db

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[require_auth] = lambda: {"auth_type": "test", "subject": "tester"}
        self.client = TestClient(app)

        customer = self.add_customer()
        product = self.add_product(sku="TEA-OOLONG", price="48.00", stock=10)
        self.customer_id = customer.id
        self.product_id = product.id

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    def _create(self, quantity=5, **extra):
        payload = {
            "customer_id": self.customer_id,
            "items": [{"product_id": self.product_id, "quantity": quantity}],
        }
        payload.update(extra)
        return self.client.post("/orders", json=payload)

    def test_order_round_trip(self):
        response = self._create(quantity=2, note="leave at door")
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["order_number"], 1)
        self.assertEqual(Decimal(body["total_amount"]), Decimal("96.00"))
        self.assertEqual(body["note"], "leave at door")
        self.assertEqual(body["items"][0]["product"]["sku"], "TEA-OOLONG")
        order_id = body["id"]

        response = self.client.post("/orders/{}/confirm".format(order_id))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "confirmed")
        self.assertEqual(response.headers["X-Product-Data-Updated"], "true")

        product = self.client.get("/products/{}".format(self.product_id)).json()
        self.assertEqual(product["current_stock"], 8)
        self.assertEqual(product["total_out"], 2)

        purchases = self.client.get("/purchases", params={"customer_id": self.customer_id}).json()
        self.assertEqual(len(purchases), 1)
        self.assertEqual(purchases[0]["quantity"], 2)
        self.assertEqual(purchases[0]["order_id"], order_id)

        response = self.client.delete("/orders/{}".format(order_id))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "deleted", "order_id": order_id})
        product = self.client.get("/products/{}".format(self.product_id)).json()
        self.assertEqual(product["current_stock"], 10)
        self.assertEqual(product["total_out"], 0)

    def test_errors_are_tagged(self):
        response = self._create(quantity=50)
        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["kind"], "insufficient_stock")
        self.assertIn("TEA-OOLONG", body["error"]["message"])

        response = self.client.post("/orders", json={"customer_id": self.customer_id, "items": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["kind"], "empty_items")

        response = self.client.post(
            "/orders",
            json={"customer_id": 999, "items": [{"product_id": self.product_id, "quantity": 1}]},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["kind"], "customer_not_found")

        response = self.client.post("/orders/555/confirm")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["kind"], "order_not_found")

    def test_invalid_state_conflict(self):
        order_id = self._create(quantity=1).json()["id"]
        self.assertEqual(self.client.post("/orders/{}/cancel".format(order_id)).status_code, 200)

        response = self.client.post("/orders/{}/confirm".format(order_id))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["kind"], "invalid_state")

    def test_malformed_body_is_validation_error(self):
        response = self.client.post(
            "/orders",
            json={"customer_id": self.customer_id, "items": [{"product_id": self.product_id, "quantity": 0}]},
        )
        self.assertEqual(response.status_code, 422)
        body = response.json()
        self.assertEqual(body["error"]["kind"], "validation_error")
        self.assertTrue(body["error"]["details"]["errors"])

    def test_oversized_integers_are_validation_errors(self):
        response = self.client.post("/products/{}/stock".format(self.product_id), json={"increase": 10**20})
        self.assertEqual(response.status_code, 422)
        self.assertFalse(response.json()["success"])
        self.assertEqual(response.json()["error"]["kind"], "validation_error")

        response = self._create(quantity=10**20)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["kind"], "validation_error")

        response = self.client.get("/orders/{}".format(10**20))
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["kind"], "validation_error")

        product = self.client.get("/products/{}".format(self.product_id)).json()
        self.assertEqual(product["current_stock"], 10)

    def test_list_orders_filters(self):
        first = self._create(quantity=1).json()["id"]
        second = self._create(quantity=1).json()["id"]
        self.client.post("/orders/{}/cancel".format(first))

        listed = self.client.get("/orders").json()
        self.assertEqual([order["id"] for order in listed], [second, first])

        pending = self.client.get("/orders", params={"status": "pending"}).json()
        self.assertEqual([order["id"] for order in pending], [second])

        other = self.client.get("/orders", params={"customer_id": self.customer_id + 1}).json()
        self.assertEqual(other, [])

    def test_adjust_stock(self):
        url = "/products/{}/stock".format(self.product_id)

        response = self.client.post(url, json={"increase": 5})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["current_stock"], 15)
        self.assertEqual(response.json()["total_in"], 15)

        response = self.client.post(url, json={"decrease": 20})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["kind"], "insufficient_stock")

        response = self.client.post(url, json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["kind"], "no_amount_given")

        response = self.client.post("/products/999/stock", json={"increase": 1})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["kind"], "product_not_found")


if __name__ == "__main__":
    unittest.main()
