"""
Smoke tests for the HTTP endpoints, backed by the in-memory fake store.
"""
import threading
import time

import pytest
from fastapi.testclient import TestClient

import api.routes as routes
from api.routes import app, get_inventory_service
from conftest import FakeStore


ADMIN = {"X-User-Email": "admin@example.com"}
STAFF = {"X-User-Email": "staff@example.com"}


@pytest.fixture
def client(store, inventory):
    store.users["admin@example.com"] = {
        "id": "u1", "name": "Ada Admin", "email": "admin@example.com", "role": "admin"
    }
    store.users["staff@example.com"] = {
        "id": "u2", "name": "Sam Staff", "email": "staff@example.com", "role": "staff"
    }
    store.seed("IV POLE", "Pole clamp", "A1", 3, record_id="1")
    store.seed("IV POLE", "Pole base", "A2", 0, record_id="2")
    inventory.refresh()

    app.dependency_overrides[get_inventory_service] = lambda: inventory
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"


def test_catalog(client):
    catalog = client.get("/api/catalog").json()["catalog"]
    assert len(catalog) == 9
    assert catalog[1] == {"id": 2, "name": "IV POLE", "icon": "fas fa-procedures"}


def test_products_require_login(client):
    assert client.get("/api/products").status_code == 401
    assert client.get("/api/products", headers={"X-User-Email": "who@example.com"}).status_code == 401


def test_list_products_filtered(client):
    resp = client.get("/api/products",
                      params={"product": "IV POLE", "stock": "outOfStock"}, headers=STAFF)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    product = data["products"][0]
    assert product["total_parts"] == 2
    assert [(p["partNo"], p["status"]) for p in product["parts"]] == [("A2", "out-of-stock")]


def test_list_products_bad_category(client):
    resp = client.get("/api/products", params={"stock": "plenty"}, headers=STAFF)
    assert resp.status_code == 400


def test_get_unknown_product(client):
    assert client.get("/api/products/999", headers=STAFF).status_code == 404


def test_add_part(client, store):
    resp = client.post("/api/products/2/parts",
                       json={"name": "Hook", "partNo": "A3", "vendor": "Acme", "quantity": 10},
                       headers=ADMIN)
    assert resp.status_code == 201
    iv_pole = next(p for p in resp.json()["products"] if p["id"] == 2)
    assert sorted(p["partNo"] for p in iv_pole["parts"]) == ["A1", "A2", "A3"]
    assert len(store.records) == 3


def test_add_duplicate_part(client):
    resp = client.post("/api/products/2/parts",
                       json={"name": "Clamp", "partNo": "a1", "vendor": "Acme"},
                       headers=ADMIN)
    assert resp.status_code == 409
    assert "a1" in resp.json()["detail"]


def test_add_missing_fields(client):
    resp = client.post("/api/products/2/parts",
                       json={"name": " ", "partNo": "A9", "vendor": "Acme"},
                       headers=ADMIN)
    assert resp.status_code == 400


def test_staff_forbidden(client, store):
    resp = client.delete("/api/products/2/parts/1", headers=STAFF)
    assert resp.status_code == 403
    assert "1" in store.records


def test_edit_and_delete(client, store):
    resp = client.put("/api/products/2/parts/1",
                      json={"name": "Clamp XL", "partNo": "A1", "vendor": "Acme", "quantity": 4},
                      headers=ADMIN)
    assert resp.status_code == 200
    assert store.records["1"]["part_name"] == "Clamp XL"

    resp = client.delete("/api/products/2/parts/2", headers=ADMIN)
    assert resp.status_code == 200
    assert "2" not in store.records


def test_quantity_adjust(client, store):
    resp = client.post("/api/products/2/parts/1/quantity", json={"delta": -1}, headers=ADMIN)
    assert resp.status_code == 200
    assert store.records["1"]["quantity"] == 2

    store.calls.clear()
    resp = client.post("/api/products/2/parts/2/quantity", json={"delta": -1}, headers=ADMIN)
    assert resp.status_code == 200
    assert store.mutating_calls() == []


def test_sync_failure_returns_502(client, store):
    store.fail_on.add("delete_many")
    resp = client.delete("/api/products/2/parts/2", headers=ADMIN)
    assert resp.status_code == 502

    history = client.get("/api/sync/history", headers=STAFF).json()["history"]
    assert history[0]["status"] == "failed"


def test_stats(client):
    stats = client.get("/api/stats", headers=STAFF).json()
    assert stats["total_parts"] == 2
    assert stats["out_of_stock"] == 1


def test_inventory_service_created_once_under_concurrent_requests(monkeypatch):
    created = []

    def slow_store():
        time.sleep(0.05)
        store = FakeStore()
        created.append(store)
        return store

    monkeypatch.setattr(routes, "_inventory", None)
    monkeypatch.setattr(routes, "create_store", slow_store)

    services = []
    threads = [threading.Thread(target=lambda: services.append(get_inventory_service()))
               for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert len(created) == 1
    assert len(services) == 5
    assert all(s is services[0] for s in services)
    assert services[0].coordinator.store is created[0]
