import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import analytics_router, auth_router, cart_router, order_router

FARM_LOCATION = {"city": "Nashik", "state": "Maharashtra", "country": "India"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(analytics_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def signup(client):
    """Register through the API and return ``(user_id, auth_headers)``.

    The session cookie is dropped so each call authenticates only with the
    headers it is given.
    """

    def _signup(email, role="consumer", full_name="Test User"):
        body = {
            "email": email,
            "password": "s3cret-pass",
            "fullName": full_name,
            "role": role,
        }
        if role == "farmer":
            body["location"] = FARM_LOCATION
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        client.cookies.clear()
        payload = response.json()
        return payload["user"]["id"], {"Authorization": f"Bearer {payload['token']}"}

    return _signup


@pytest.fixture()
def api_shipping_address():
    return {
        "fullName": "Asha Patel",
        "phone": "9876543210",
        "address": "12 Market Road",
        "area": "Old Town",
        "city": "Pune",
        "pin_code": "411001",
    }
