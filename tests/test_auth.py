from conftest import PASSWORD


def test_register_login_and_me(client):
    r = client.post("/api/auth/register",
                    json={"email": "Carol@Example.com", "password": PASSWORD, "firstName": "Carol"})
    assert r.status_code == 201
    assert r.get_json()["email"] == "carol@example.com"

    r = client.post("/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD})
    assert r.status_code == 200
    body = r.get_json()
    assert body["firstName"] == "Carol"
    assert body["token"]

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.get_json() == {"id": 1, "email": "carol@example.com", "firstName": "Carol"}


def test_register_seeds_default_categories(client, alice):
    r = client.get("/api/categories", headers=alice)
    names = {c["name"]: c["type"] for c in r.get_json()}
    assert names == {
        "Entertainment": "Expense", "Food": "Expense", "Rent": "Expense",
        "Salary": "Income", "Utilities": "Expense",
    }


def test_register_rejects_duplicate_email(client, alice):
    r = client.post("/api/auth/register", json={"email": "ALICE@example.com", "password": PASSWORD})
    assert r.status_code == 400
    assert r.get_json()["msg"] == "Email already registered"


def test_register_reports_every_password_rule(client):
    r = client.post("/api/auth/register", json={"email": "dan@example.com", "password": "abc"})
    assert r.status_code == 400
    errors = r.get_json()["errors"]
    assert "Password must be at least 6 characters long" in errors
    assert "Password must contain at least one uppercase letter" in errors
    assert "Password must contain at least one number" in errors
    assert "Password must contain at least one special character" in errors
    assert "Password must contain at least one lowercase letter" not in errors


def test_register_rejects_bad_email(client):
    r = client.post("/api/auth/register", json={"email": "not-an-email", "password": PASSWORD})
    assert r.status_code == 400


def test_login_wrong_password(client, alice):
    r = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1!x"})
    assert r.status_code == 401


def test_login_unknown_user(client):
    r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert r.status_code == 401


def test_login_missing_fields(client):
    r = client.post("/api/auth/login", json={"email": "alice@example.com"})
    assert r.status_code == 400


def test_missing_token_is_401(client):
    for path in ("/api/transactions", "/api/categories", "/api/transactions/summary",
                 "/api/transactions/summary/monthly", "/api/transactions/summary/by-category"):
        r = client.get(path)
        assert r.status_code == 401, path
        assert "msg" in r.get_json()


def test_garbage_token_is_401(client):
    r = client.get("/api/transactions", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401


def test_token_signed_with_other_key_is_401(client, tmp_path):
    from finance_api.app import create_app
    other = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "other.db"),
        "JWT_SECRET_KEY": "a-completely-different-secret-key-for-signing",
    }).test_client()
    r = other.post("/api/auth/register", json={"email": "eve@example.com", "password": PASSWORD})
    assert r.status_code == 201
    token = other.post("/api/auth/login",
                       json={"email": "eve@example.com", "password": PASSWORD}).get_json()["token"]

    r = client.get("/api/transactions", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_expired_token_is_401(tmp_path):
    from datetime import timedelta
    from finance_api.app import create_app
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "expired.db"),
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(seconds=-1),
    })
    client = app.test_client()
    client.post("/api/auth/register", json={"email": "old@example.com", "password": PASSWORD})
    token = client.post("/api/auth/login",
                        json={"email": "old@example.com", "password": PASSWORD}).get_json()["token"]
    r = client.get("/api/categories", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.get_json()["msg"] == "Token has expired"


def test_health_needs_no_token(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_token_for_deleted_user_is_401(client, tmp_path):
    from finance_api.app import create_app
    # same signing key, empty database: the token's user id no longer exists
    reset = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "reset.db"),
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    }).test_client()
    client.post("/api/auth/register", json={"email": "gone@example.com", "password": PASSWORD})
    token = client.post("/api/auth/login",
                        json={"email": "gone@example.com", "password": PASSWORD}).get_json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = reset.post("/api/categories", json={"name": "Gifts", "type": "Expense"}, headers=headers)
    assert r.status_code == 401
    assert r.get_json()["msg"] == "Token user no longer exists"
    assert reset.get("/api/transactions", headers=headers).status_code == 401
