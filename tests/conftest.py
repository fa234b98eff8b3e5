import pytest

from finance_api.app import create_app

PASSWORD = "Secr3t!pass"


@pytest.fixture
def app(tmp_path):
    """Fresh app with its own SQLite file per test."""
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "finance.db"),
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def register_and_login(client, email, first_name="Test"):
    r = client.post("/api/auth/register",
                    json={"email": email, "password": PASSWORD, "firstName": first_name})
    assert r.status_code == 201, r.get_json()
    r = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.get_json()
    return {"Authorization": f"Bearer {r.get_json()['token']}"}


@pytest.fixture
def alice(client):
    return register_and_login(client, "alice@example.com", "Alice")


@pytest.fixture
def bob(client):
    return register_and_login(client, "bob@example.com", "Bob")


def category_id(client, headers, name):
    r = client.get("/api/categories", headers=headers)
    return next(c["id"] for c in r.get_json() if c["name"] == name)


def add_tx(client, headers, title, amount, kind, category, date=None):
    payload = {"title": title, "amount": amount, "type": kind,
               "categoryId": category_id(client, headers, category)}
    if date:
        payload["date"] = date
    r = client.post("/api/transactions", json=payload, headers=headers)
    assert r.status_code == 201, r.get_json()
    return r.get_json()
