from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tribute.catalog import get_catalog
from tribute.deps import get_redemption_service
from tribute.routes.gifts import router
from tribute.schemas import Confirmation, NotificationRequest
from tribute.services.redemption import RedemptionService
from tribute.utils.errors import (
    BalanceUnavailable,
    BalanceUpdateError,
    InsufficientBalance,
    InvalidGift,
    MissingInformation,
    install_exception_handlers,
)

ORDER_ID = uuid.uuid4()


def _confirmation() -> Confirmation:
    return Confirmation(
        order_id=ORDER_ID,
        gift_id="rose-bouquet-3",
        gift_name="3 Rose Bouquet",
        gift_type="3 rose bouquet",
        price=300,
        balance=200,
        notification=NotificationRequest(
            gift_type="3 rose bouquet",
            delivery_address="Home",
            preferred_time="noon",
        ),
    )


@pytest.fixture
def service(catalog, dispatcher, settings):
    svc = RedemptionService(MagicMock(), catalog, dispatcher, settings)
    svc.redeem = AsyncMock(return_value=_confirmation())
    svc.get_balance = AsyncMock(return_value=500)
    return svc


@pytest.fixture
def client(service, catalog):
    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(router)

    app.dependency_overrides[get_redemption_service] = lambda: service
    app.dependency_overrides[get_catalog] = lambda: catalog

    return TestClient(app)


def test_list_gifts_grouped_by_category(client):
    response = client.get("/api/v1/gifts")

    assert response.status_code == 200
    data = response.json()
    assert [c["category"] for c in data] == ["flowers", "chocolates", "plushies"]
    roses = data[0]["gifts"][0]
    assert roses == {
        "id": "rose-bouquet-3",
        "name": "3 Rose Bouquet",
        "gift_type": "3 rose bouquet",
        "price": 300,
        "description": "Three red roses, hand tied",
    }


def test_get_balance(client):
    response = client.get("/api/v1/balance")
    assert response.status_code == 200
    assert response.json() == {"amount": 500}


def test_get_balance_unavailable(client, service):
    service.get_balance.side_effect = BalanceUnavailable()
    response = client.get("/api/v1/balance")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "balance_unavailable"


def test_create_order_happy_path(client, service, dispatcher):
    payload = {
        "gift_id": "rose-bouquet-3",
        "delivery_address": "Home",
        "delivery_instructions": "",
        "preferred_time": "noon",
        "balance": 500,
    }
    response = client.post("/api/v1/orders", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body == {
        "order_id": str(ORDER_ID),
        "gift_id": "rose-bouquet-3",
        "gift_name": "3 Rose Bouquet",
        "gift_type": "3 rose bouquet",
        "price": 300,
        "balance": 200,
    }
    service.redeem.assert_awaited_once_with(
        gift_id="rose-bouquet-3",
        delivery_address="Home",
        delivery_instructions="",
        preferred_time="noon",
        balance=500,
    )
    # Background task ran after the response
    assert len(dispatcher.sent) == 1
    assert dispatcher.sent[0].gift_type == "3 rose bouquet"


def test_notification_failure_keeps_success_response(catalog, failing_dispatcher, settings):
    svc = RedemptionService(MagicMock(), catalog, failing_dispatcher, settings)
    svc.redeem = AsyncMock(return_value=_confirmation())

    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[get_redemption_service] = lambda: svc

    response = TestClient(app).post(
        "/api/v1/orders",
        json={"gift_id": "rose-bouquet-3", "delivery_address": "Home", "preferred_time": "noon"},
    )
    assert response.status_code == 201
    assert response.json()["balance"] == 200


@pytest.mark.parametrize(
    "error, status_code, code, title",
    [
        (MissingInformation("Please fill in your preferred delivery time"), 400, "missing_information", "Missing Information"),
        (InvalidGift("diamond-ring"), 404, "invalid_gift", "Invalid Gift"),
        (InsufficientBalance(200, 300), 409, "insufficient_balance", "Insufficient Balance"),
        (BalanceUpdateError(), 409, "balance_update_error", "Balance Update Failed"),
    ],
)
def test_create_order_errors(client, service, dispatcher, error, status_code, code, title):
    service.redeem.side_effect = error

    response = client.post("/api/v1/orders", json={"gift_id": "rose-bouquet-3"})

    assert response.status_code == status_code
    body = response.json()["error"]
    assert body["code"] == code
    assert body["title"] == title
    assert dispatcher.sent == []


def test_create_order_requires_gift_id(client):
    response = client.post("/api/v1/orders", json={"delivery_address": "Home"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
