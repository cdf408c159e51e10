from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import PASSWORD, create_user


def _register(client: TestClient, **overrides):
    payload = {
        "email": "asha@example.com",
        "full_name": "Asha Patel",
        "phone": "9876543210",
        "password": "StrongPass1",
    }
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


def test_register_and_login(client: TestClient):
    registered = _register(client)
    assert registered.status_code == 201, registered.text
    assert registered.json()["data"]["role"] == "customer"
    assert "password_hash" not in registered.json()["data"]

    login = client.post("/api/v1/auth/login", json={"email": "asha@example.com", "password": "StrongPass1"})
    assert login.status_code == 200
    assert login.json()["data"]["access_token"]
    assert "access_token" in login.cookies

    me = client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "asha@example.com"


def test_duplicate_email_and_phone_are_rejected(client: TestClient):
    _register(client)

    same_email = _register(client, phone="9876500000")
    same_phone = _register(client, email="other@example.com")

    assert same_email.status_code == 409
    assert same_email.json()["message"] == "Email already registered"
    assert same_phone.status_code == 409
    assert same_phone.json()["message"] == "Phone number already registered"


def test_weak_password_fails_validation(client: TestClient):
    response = _register(client, password="password")

    assert response.status_code == 422
    assert response.json()["success"] is False


def test_login_with_wrong_password(client: TestClient, db_session: Session):
    user = create_user(db_session)

    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": "WrongPass9"})

    assert response.status_code == 401
    assert response.json()["message"] == "Incorrect email or password"


def test_inactive_account_cannot_login(client: TestClient, db_session: Session):
    user = create_user(db_session)
    user.is_active = False
    db_session.commit()

    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 403


def test_invalid_token_is_rejected(client: TestClient):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"


def test_logout_clears_cookie(client: TestClient, db_session: Session):
    user = create_user(db_session)
    client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})

    response = client.post("/api/v1/auth/logout")

    assert response.status_code == 200
    assert client.get("/api/v1/auth/me").status_code == 401


def test_csrf_token_endpoint_sets_cookie(client: TestClient):
    response = client.get("/api/v1/auth/csrf-token")

    assert response.status_code == 200
    assert response.cookies.get("csrf_token")
