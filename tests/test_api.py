import logging
import threading
import time

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from caja.config.database import build_engine
from caja.config.settings import settings
from caja.main import app
from caja.modules.cart import cart_registry
from caja.modules.drafts import DraftService


def open_register(client, register_id, opening_float=50000):
    response = client.post(f"/api/v1/registers/{register_id}/sessions", json={"opening_float": opening_float})
    assert response.status_code == 200, response.text
    return response.json()


def add_item(client, register_id, product_id, quantity):
    response = client.post(
        f"/api/v1/registers/{register_id}/cart/items",
        json={"product_id": product_id, "quantity": quantity}
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestSessionEndpoints:

    def test_open_twice_conflicts(self, client, seed):
        open_register(client, seed.register)

        response = client.post(f"/api/v1/registers/{seed.register}/sessions", json={"opening_float": 100})

        assert response.status_code == 409
        assert response.json()["code"] == "already_open"

    def test_open_negative_float(self, client, seed):
        response = client.post(f"/api/v1/registers/{seed.register}/sessions", json={"opening_float": -1})
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_amount"

    def test_open_session_lookup(self, client, seed):
        response = client.get(f"/api/v1/registers/{seed.register}/sessions/open")
        assert response.status_code == 200
        assert response.json() is None

        session = open_register(client, seed.register)
        response = client.get(f"/api/v1/registers/{seed.register}/sessions/open")
        assert response.json()["id"] == session["id"]

    def test_operator_header_required(self, client, seed):
        response = TestClient(app).post(f"/api/v1/registers/{seed.register}/sessions", json={})
        assert response.status_code == 401

    def test_movements_audit_and_close(self, client, seed):
        session = open_register(client, seed.register)
        base = f"/api/v1/sessions/{session['id']}"

        response = client.post(f"{base}/movements", json={"movement_type": "ingreso", "amount": 5000})
        assert response.status_code == 200
        response = client.post(f"{base}/movements", json={"movement_type": "retiro", "amount": 0})
        assert response.status_code == 422

        audit = client.post(f"{base}/audit", json={"counted_amount": 54000}).json()
        assert float(audit["theoretical_float"]) == 55000
        assert float(audit["variance"]) == -1000

        closed = client.post(f"{base}/close", json={"declared_float": 55000, "notes": "ok"})
        assert closed.status_code == 200
        assert closed.json()["status"] == "cerrada"
        assert float(closed.json()["variance"]) == 0

        again = client.post(f"{base}/close", json={"declared_float": 55000})
        assert again.status_code == 409
        assert again.json()["code"] == "session_not_open"

        movements = client.get(f"{base}/movements").json()
        assert len(movements) == 1

    def test_unknown_session(self, client, seed):
        response = client.get("/api/v1/sessions/9999/summary")
        assert response.status_code == 404


class TestCartAndSaleEndpoints:

    def test_cart_operations(self, client, seed):
        cart = add_item(client, seed.register, seed.coffee, 2)
        cart = add_item(client, seed.register, seed.coffee, 1)
        assert cart["items_count"] == 3
        assert float(cart["total"]) == 3000

        line_id = cart["lines"][0]["line_id"]
        cart = client.patch(
            f"/api/v1/registers/{seed.register}/cart/items/{line_id}", json={"quantity": 1}
        ).json()
        assert float(cart["total"]) == 1000

        quote = client.post(
            f"/api/v1/registers/{seed.register}/cart/quote",
            json={"payment_method": "efectivo", "amount_received": 5000}
        ).json()
        assert float(quote["change_due"]) == 4000

        cart = client.delete(f"/api/v1/registers/{seed.register}/cart").json()
        assert cart["lines"] == []

    def test_commit_sale(self, client, seed):
        session = open_register(client, seed.register)
        add_item(client, seed.register, seed.coffee, 2)

        response = client.post("/api/v1/sales", json={
            "session_id": session["id"],
            "payment_method": "efectivo",
            "document_type": "boleta",
            "amount_received": 2000
        })

        assert response.status_code == 200, response.text
        sale = response.json()
        assert sale["folio"].startswith("B-")
        assert float(sale["total"]) == 2000
        assert float(sale["change_due"]) == 0
        assert [item["quantity"] for item in sale["items"]] == [2]

        cart = client.get(f"/api/v1/registers/{seed.register}/cart").json()
        assert cart["lines"] == []

        summary = client.get(f"/api/v1/sessions/{session['id']}/summary").json()
        assert summary["sales_count"] == 1
        assert float(summary["theoretical_float"]) == 52000

        sales = client.get("/api/v1/sales", params={"session_id": session["id"]}).json()
        assert [s["id"] for s in sales] == [sale["id"]]
        assert client.get(f"/api/v1/sales/{sale['id']}").json()["folio"] == sale["folio"]

    def test_insufficient_stock_keeps_cart(self, client, seed):
        session = open_register(client, seed.register)
        add_item(client, seed.register, seed.juice, 4)

        response = client.post("/api/v1/sales", json={
            "session_id": session["id"], "payment_method": "tarjeta"
        })

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "insufficient_stock"
        assert body["lines"][0]["available"] == 3

        cart = client.get(f"/api/v1/registers/{seed.register}/cart").json()
        assert cart["items_count"] == 4

    def test_invoice_without_client(self, client, seed):
        session = open_register(client, seed.register)
        add_item(client, seed.register, seed.coffee, 1)

        response = client.post("/api/v1/sales", json={
            "session_id": session["id"], "payment_method": "tarjeta", "document_type": "factura"
        })

        assert response.status_code == 422
        assert response.json()["code"] == "client_required"

    def test_amount_received_only_for_cash(self, client, seed):
        session = open_register(client, seed.register)

        response = client.post("/api/v1/sales", json={
            "session_id": session["id"], "payment_method": "tarjeta", "amount_received": 1000
        })

        assert response.status_code == 422


class TestDraftEndpoints:

    def test_save_list_load_delete(self, client, seed):
        add_item(client, seed.register, seed.cake, 2)

        response = client.post("/api/v1/drafts", json={"name": "Mesa 2", "register_id": seed.register})
        assert response.status_code == 200, response.text
        draft = response.json()
        assert float(draft["total"]) == 5000

        assert client.get(f"/api/v1/registers/{seed.register}/cart").json()["lines"] == []
        assert [d["id"] for d in client.get("/api/v1/drafts").json()] == [draft["id"]]

        cart = client.post(
            f"/api/v1/drafts/{draft['id']}/load", json={"register_id": seed.other_register}
        ).json()
        assert cart["register_id"] == seed.other_register
        assert cart["items_count"] == 2

        assert client.delete(f"/api/v1/drafts/{draft['id']}").status_code == 200
        assert client.delete(f"/api/v1/drafts/{draft['id']}").status_code == 404

    def test_save_empty_cart(self, client, seed):
        response = client.post("/api/v1/drafts", json={"name": "Nada", "register_id": seed.register})
        assert response.status_code == 422


class TestCartLockOrdering:

    def test_draft_save_holding_cart_is_not_blocked_by_pending_sale(self, client, seed, engine, monkeypatch):
        session = open_register(client, seed.register)
        add_item(client, seed.register, seed.coffee, 1)

        monkeypatch.setattr(settings, "sqlite_busy_timeout", 2)
        short_wait_engine = build_engine(str(engine.url))
        ShortWaitSession = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False,
                                        bind=short_wait_engine)
        responses = {}

        def sell():
            responses["sale"] = client.post("/api/v1/sales", json={
                "session_id": session["id"], "payment_method": "tarjeta"
            })

        try:
            with cart_registry.locked(seed.register) as cart:
                seller = threading.Thread(target=sell)
                seller.start()
                # la venta queda esperando el carrito
                time.sleep(0.5)

                db = ShortWaitSession()
                try:
                    draft = DraftService(db).save("Mesa 1", cart, operator_id=7, register_id=seed.register)
                finally:
                    db.close()

            seller.join(timeout=30)
        finally:
            short_wait_engine.dispose()

        assert draft.id is not None
        assert responses["sale"].status_code == 422
        assert responses["sale"].json()["code"] == "validation_error"

    def test_sales_on_other_register_proceed_while_cart_is_held(self, client, seed):
        session = open_register(client, seed.other_register)
        add_item(client, seed.other_register, seed.cake, 1)

        with cart_registry.locked(seed.register):
            response = client.post("/api/v1/sales", json={
                "session_id": session["id"], "payment_method": "tarjeta"
            })

        assert response.status_code == 200


class TestRequestLogging:

    def test_request_log_includes_operator(self, client, caplog):
        caplog.set_level(logging.INFO, logger="caja.core.middleware")

        client.get("/api/v1/health")

        assert "GET /api/v1/health - Operador: 7 - Status: 200" in caplog.text
