from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
import pytest
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.main import app


async def _fake_db():
    yield AsyncMock()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = _fake_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_allocate(client):
    resp = client.post("/api/promotions/allocate", json={
        "items": [{"unit_price": 100}, {"unit_price": 200}, {"unit_price": 300, "quantity": 1}],
        "total_discount": 100,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert [int(d) for d in body["discounts"]] == [17, 33, 50]
    assert int(body["total_discount"]) == 100


def test_allocate_accepts_price_alias_and_largest(client):
    resp = client.post("/api/promotions/allocate", json={
        "items": [{"price": 300}, {"price": 100}, {"price": 200}],
        "total_discount": 100,
        "absorb": "largest",
    })
    assert resp.status_code == 200
    assert [int(d) for d in resp.json()["discounts"]] == [50, 17, 33]


def test_allocate_rejects_negative_price(client):
    resp = client.post("/api/promotions/allocate", json={
        "items": [{"unit_price": -5}],
        "total_discount": 10,
    })
    assert resp.status_code == 422
    assert any("unit_price" in err["loc"] for err in resp.json()["detail"])


def test_allocate_fractional_discount_is_conserved(client):
    resp = client.post("/api/promotions/allocate", json={
        "items": [{"unit_price": 100}, {"unit_price": 200}],
        "total_discount": 10.5,
    })
    assert resp.status_code == 200
    discounts = [Decimal(d) for d in resp.json()["discounts"]]
    assert discounts == [Decimal("4"), Decimal("6.5")]
    assert sum(discounts) == Decimal("10.5")


def test_allocate_accepts_zero_quantity(client):
    resp = client.post("/api/promotions/allocate", json={
        "items": [{"unit_price": 100, "quantity": 0}, {"unit_price": 200, "quantity": 0}],
        "total_discount": 50,
    })
    assert resp.status_code == 200
    assert [int(d) for d in resp.json()["discounts"]] == [0, 0]


def test_summary_accepts_price_alias(client):
    resp = client.post("/api/promotions/summary", json={
        "items": [{"price": 100}, {"price": 300}],
        "total_discount": 40,
    })
    assert resp.status_code == 200
    assert [int(line["unit_price"]) for line in resp.json()["lines"]] == [100, 300]


def test_summary(client):
    resp = client.post("/api/promotions/summary", json={
        "items": [{"label": "Office 365", "unit_price": 100}, {"unit_price": 200}, {"unit_price": 300}],
        "total_discount": 100,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert [line["label"] for line in body["lines"]] == ["Office 365", "Sản phẩm 2", "Sản phẩm 3"]
    assert int(body["subtotal"]) == 600
    assert int(body["total_after_discount"]) == 500


def test_cart_summary(client):
    rows = [
        SimpleNamespace(name="Windows 11 Pro", price=300000, quantity=1),
        SimpleNamespace(name="Canva Pro", price=100000, quantity=1),
    ]
    with patch("app.services.promo_service.get_cart_items", return_value=rows):
        resp = client.get("/api/cart/42/summary", params={"discount": 40000})
    assert resp.status_code == 200
    assert [int(line["discount"]) for line in resp.json()["lines"]] == [30000, 10000]


def test_cart_summary_negative_discount(client):
    resp = client.get("/api/cart/42/summary", params={"discount": -1})
    assert resp.status_code == 422


def test_remove_missing_item_is_404(client):
    with patch("app.api.cart.remove_cart_item", return_value=False):
        resp = client.delete("/api/cart/42/items/nope")
    assert resp.status_code == 404


def test_update_to_zero_returns_null(client):
    with patch("app.api.cart.update_cart_item_quantity", return_value=None) as update:
        resp = client.patch("/api/cart/42/items/office365-1y", json={"quantity": 0})
    assert resp.status_code == 200
    assert resp.json() is None
    update.assert_awaited_once()


def test_clear_cart(client):
    with patch("app.api.cart.clear_cart", return_value=3):
        resp = client.delete("/api/cart/42")
    assert resp.json() == {"removed": 3}


def test_get_missing_item_is_404(client):
    with patch("app.api.cart.get_cart_item", return_value=None):
        resp = client.get("/api/cart/42/items/nope")
    assert resp.status_code == 404
