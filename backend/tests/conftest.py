# Shared fixtures: one app per test against a throwaway SQLite file.

import pytest
from fastapi.testclient import TestClient

from canteen.config import Settings
from canteen.main import create_app

PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'canteen-test.db'}",
        debug=True,
        secret_key="test-secret-key-for-canteen-pos",
        login_max_attempts=1000,
        api_max_requests=10000,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def context(app):
    return app.state.context


@pytest.fixture
def db(context):
    session = context.database.session()
    try:
        yield session
    finally:
        session.close()


def signup(client, name, email, password=PASSWORD):
    response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    return bearer(signup(client, "Alice Admin", "alice@canteen.io")["token"])


@pytest.fixture
def cashier_headers(client, admin_headers):
    return bearer(signup(client, "Carl Cashier", "carl@canteen.io")["token"])


def create_product(client, headers, **overrides):
    payload = {
        "name": "Veggie Wrap",
        "category": "Meals",
        "price": 4.5,
        "stock": 50,
        "allergens": ["gluten"],
        "supplier": "Fresh Farms",
        "expiryDate": "2099-12-31",
    }
    payload.update(overrides)
    response = client.post("/api/products", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_order(client, headers, items, customer="Dana", status=None):
    payload = {"customerName": customer, "items": items}
    if status is not None:
        payload["status"] = status
    response = client.post("/api/orders", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
