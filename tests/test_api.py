import unittest

from fastapi.testclient import TestClient

from shopledger.application import create_app
from shopledger.config import Settings


def _client(**overrides):
    values = {"DATABASE_URL": "sqlite://", "AUTH_REQUIRED": False}
    values.update(overrides)
    return TestClient(create_app(Settings(**values)))


class ShopApiTest(unittest.TestCase):
    def setUp(self):
        self.client = _client()
        self.customer = self.client.post(
            "/customers",
            json={"name": "Ana", "cedula": "V-1", "email": "ana@example.com"},
        ).json()
        self.product = self.client.post(
            "/products",
            json={"name": "Widget", "price": 20, "minStock": 2},
        ).json()
        self.client.post(f"/products/{self.product['id']}/ingreso", json={"cantidad": 5, "precio": 10})
        self.client.post(f"/products/{self.product['id']}/ingreso", json={"cantidad": 5, "precio": 12})

    def _sale(self, quantity, **extra):
        body = {
            "customerId": self.customer["id"],
            "items": [{"productId": self.product["id"], "quantity": quantity, "price": 20}],
        }
        body.update(extra)
        return self.client.post("/sales", json=body)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["database"]["connected"])

    def test_ingest_returns_product_and_lot(self):
        response = self.client.post(
            f"/products/{self.product['id']}/ingreso",
            json={"quantity": 3, "purchase_price": 11},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["product"]["stock"], 13)
        self.assertEqual(body["lot"]["remaining"], 3)
        self.assertEqual(len(body["product"]["lots"]), 3)

    def test_ingest_rejects_zero_quantity(self):
        response = self.client.post(
            f"/products/{self.product['id']}/ingreso",
            json={"cantidad": 0, "precio": 10},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_create_sale_and_fetch(self):
        response = self._sale(7)
        self.assertEqual(response.status_code, 201)
        sale = response.json()
        self.assertEqual(sale["total"], 140.0)
        self.assertEqual(sale["profit"], 66.0)
        self.assertEqual(sale["status"], "completed")
        self.assertEqual(sale["items"][0]["product_name"], "Widget")
        self.assertEqual(len(sale["items"][0]["allocations"]), 2)

        fetched = self.client.get(f"/sales/{sale['id']}").json()
        self.assertEqual(fetched["invoice_number"], sale["invoice_number"])

        product = self.client.get(f"/products/{self.product['id']}").json()
        self.assertEqual(product["stock"], 3)
        self.assertEqual([lot["remaining"] for lot in product["lots"]], [0, 3])

        history = self.client.get(f"/customers/{self.customer['id']}/sales").json()
        self.assertEqual([s["id"] for s in history], [sale["id"]])

        items = self.client.get(f"/sales/{sale['id']}/items")
        self.assertEqual(items.status_code, 200)
        self.assertEqual(
            [(i["product_id"], i["quantity"], i["profit"]) for i in items.json()],
            [(self.product["id"], 7, 66.0)],
        )
        self.assertEqual(self.client.get("/sales/999/items").status_code, 404)

    def test_insufficient_stock_is_conflict(self):
        response = self._sale(11)
        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertEqual(body["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(body["details"]["shortfall"], 1)
        self.assertEqual(self.client.get("/sales").json(), [])

    def test_missing_and_malformed_requests(self):
        self.assertEqual(self.client.get("/sales/999").status_code, 404)
        self.assertEqual(self.client.get("/customers/999").status_code, 404)

        response = self.client.post("/sales", json={"items": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

        response = self.client.post("/sales", json={"customerId": self.customer["id"], "items": []})
        self.assertEqual(response.status_code, 400)

    def test_credit_sale_payment_flow(self):
        sale = self._sale(5, paymentType="credito", amountPaid=0).json()
        self.assertEqual(sale["status"], "pending")

        response = self.client.put(f"/sales/{sale['id']}", json={"amountPaid": 60})
        self.assertEqual(response.json()["status"], "pending")

        response = self.client.put(f"/sales/{sale['id']}", json={"amountPaid": 150})
        self.assertEqual(response.status_code, 400)

        response = self.client.put(f"/sales/{sale['id']}", json={"amountPaid": 100})
        self.assertEqual(response.json()["status"], "completed")

        response = self.client.put(f"/sales/{sale['id']}", json={})
        self.assertEqual(response.status_code, 400)

    def test_delete_sale_restores_stock(self):
        sale = self._sale(7).json()

        response = self.client.delete(f"/sales/{sale['id']}")
        self.assertEqual(response.status_code, 200)

        product = self.client.get(f"/products/{self.product['id']}").json()
        self.assertEqual(product["stock"], 10)
        self.assertEqual([lot["remaining"] for lot in product["lots"]], [5, 5])
        self.assertEqual(self.client.get(f"/sales/{sale['id']}").status_code, 404)

    def test_delete_conflicts(self):
        self._sale(1)
        self.assertEqual(self.client.delete(f"/products/{self.product['id']}").status_code, 409)
        self.assertEqual(self.client.delete(f"/customers/{self.customer['id']}").status_code, 409)

        duplicate = self.client.post("/customers", json={"name": "Otra", "idNumber": "V-1"})
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(duplicate.json()["code"], "CONFLICT")

    def test_cash_ledger(self):
        first = self.client.post(
            "/caja",
            json={"fecha": "2024-05-01T09:00:00Z", "concepto": "Fondo", "moneda": "USD", "entrada": 100},
        ).json()
        second = self.client.post(
            "/caja",
            json={"fecha": "2024-05-02T09:00:00Z", "concepto": "Compra", "moneda": "USD", "salida": 40},
        ).json()
        self.assertEqual(second["balance"], 60.0)

        response = self.client.delete(f"/caja/{first['id']}")
        self.assertEqual(response.json()["rebalanced"], 1)
        self.assertEqual(self.client.get("/caja/balance").json()["balance"], -40.0)

    def test_exchange_rate(self):
        self.assertEqual(self.client.get("/tasa-cambio").status_code, 404)
        self.assertEqual(self.client.post("/tasa-cambio", json={"tasa": 0}).status_code, 400)

        self.assertEqual(self.client.post("/tasa-cambio", json={"tasa": 36.5}).status_code, 201)
        self.assertEqual(self.client.get("/tasa-cambio").json()["rate"], 36.5)
        self.assertEqual(len(self.client.get("/tasa-cambio/history").json()), 1)

    def test_expenses_and_reports(self):
        response = self.client.post(
            "/gastos",
            json={
                "concepto": "Luz",
                "monto": 12.5,
                "categoria": "empresariales",
                "moneda": "USD",
                "fecha": "2024-05-01T00:00:00Z",
            },
        )
        self.assertEqual(response.status_code, 201)
        bad = self.client.post(
            "/gastos",
            json={"concepto": "Luz", "monto": 1, "categoria": "otros", "moneda": "USD", "fecha": "2024-05-01"},
        )
        self.assertEqual(bad.status_code, 400)

        self._sale(2)
        financial = self.client.get("/reports/financial").json()
        self.assertEqual(financial["total_expenses"], 12.5)
        self.assertEqual(financial["gross_profit"], 20.0)

        self.assertEqual(self.client.get("/reports/dashboard").status_code, 200)
        self.assertEqual(self.client.get("/reports/top-products").json()[0]["name"], "Widget")

        export = self.client.get("/reports/sales.xlsx")
        self.assertEqual(export.status_code, 200)
        self.assertTrue(export.headers["content-type"].startswith("application/vnd.openxmlformats"))


class AuthApiTest(unittest.TestCase):
    def setUp(self):
        self.client = _client(
            AUTH_REQUIRED=True,
            ADMIN_USERNAME="admin",
            ADMIN_PASSWORD="s3cret",
            SESSION_SECRET="test-secret",
            PBKDF2_ROUNDS=1000,
            API_KEYS="key-one, key-two",
        )

    def test_resource_routes_require_login(self):
        response = self.client.get("/customers")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "NOT_AUTHENTICATED")
        self.assertEqual(self.client.get("/health").status_code, 200)

    def test_session_login_and_logout(self):
        created = self.client.post("/auth/init").json()
        self.assertEqual(created["message"], "Admin user created")
        self.assertEqual(self.client.post("/auth/init").json()["message"], "Admin user already exists")

        bad = self.client.post("/auth/login", json={"username": "admin", "password": "nope"})
        self.assertEqual(bad.status_code, 401)

        good = self.client.post("/auth/login", json={"username": "admin", "password": "s3cret"})
        self.assertEqual(good.status_code, 200)
        self.assertTrue(good.json()["auth"])
        self.assertEqual(self.client.get("/auth/me").json()["username"], "admin")
        self.assertEqual(self.client.get("/customers").status_code, 200)

        self.client.post("/auth/logout")
        self.assertEqual(self.client.get("/customers").status_code, 401)

    def test_api_key_header(self):
        response = self.client.get("/customers", headers={"X-API-Key": "key-two"})
        self.assertEqual(response.status_code, 200)
        response = self.client.get("/customers", headers={"X-API-Key": "wrong"})
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()
