from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import PASSWORD, auth_headers, create_user
from foodcity.models.user import UserRole

EMPLOYEE = {
    "name": "Ramesh Patel",
    "email": "Ramesh@FoodCity.in",
    "phone": "9876500001",
    "whatsapp": "9876500002",
    "address": "Adajan, Surat",
}


def _admin_headers(client: TestClient, db: Session) -> dict:
    return auth_headers(client, create_user(db, role=UserRole.ADMIN))


def test_admin_manages_employees(client: TestClient, db_session: Session):
    headers = _admin_headers(client, db_session)

    created = client.post("/api/v1/admin/employees", json=EMPLOYEE, headers=headers)
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["message"] == "Employee created successfully"
    assert body["data"]["email"] == "ramesh@foodcity.in"
    employee_id = body["data"]["id"]

    other = dict(EMPLOYEE, name="Suresh", email="suresh@foodcity.in", phone="9876500003", whatsapp="9876500004")
    assert client.post("/api/v1/admin/employees", json=other, headers=headers).status_code == 201

    listing = client.get("/api/v1/admin/employees", headers=headers).json()["data"]
    assert [employee["name"] for employee in listing] == ["Ramesh Patel", "Suresh"]

    updated = client.put(
        f"/api/v1/admin/employees/{employee_id}",
        json={"address": "Vesu, Surat"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["message"] == "Employee updated successfully"
    assert updated.json()["data"]["address"] == "Vesu, Surat"
    assert updated.json()["data"]["phone"] == EMPLOYEE["phone"]

    deleted = client.delete(f"/api/v1/admin/employees/{employee_id}", headers=headers)
    assert deleted.json()["message"] == "Employee deleted successfully"

    missing = client.get(f"/api/v1/admin/employees/{employee_id}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Employee not found"


def test_employee_numbers_must_be_unique(client: TestClient, db_session: Session):
    headers = _admin_headers(client, db_session)
    first = client.post("/api/v1/admin/employees", json=EMPLOYEE, headers=headers).json()["data"]
    second = client.post(
        "/api/v1/admin/employees",
        json=dict(EMPLOYEE, email=None, phone="9876500010", whatsapp="9876500011"),
        headers=headers,
    ).json()["data"]

    # Another employee's WhatsApp number cannot be reused as a phone number.
    clash = client.post(
        "/api/v1/admin/employees",
        json=dict(EMPLOYEE, email=None, phone=EMPLOYEE["whatsapp"], whatsapp="9876500020"),
        headers=headers,
    )
    assert clash.status_code == 400
    assert clash.json()["message"] == "Employee with this email or phone number already exists"

    update_clash = client.put(
        f"/api/v1/admin/employees/{second['id']}",
        json={"phone": first["phone"]},
        headers=headers,
    )
    assert update_clash.status_code == 400

    # Re-saving an employee's own numbers is not a conflict.
    same = client.put(
        f"/api/v1/admin/employees/{first['id']}",
        json={"phone": first["phone"], "whatsapp": first["whatsapp"]},
        headers=headers,
    )
    assert same.status_code == 200


def test_employee_phone_must_be_ten_digits(client: TestClient, db_session: Session):
    headers = _admin_headers(client, db_session)

    response = client.post("/api/v1/admin/employees", json=dict(EMPLOYEE, phone="98765"), headers=headers)

    assert response.status_code == 422


def test_employee_routes_require_admin(client: TestClient, db_session: Session):
    customer = create_user(db_session)

    response = client.get("/api/v1/admin/employees", headers=auth_headers(client, customer))

    assert response.status_code == 403


def test_company_settings_default_and_update(client: TestClient, db_session: Session):
    headers = _admin_headers(client, db_session)

    initial = client.get("/api/v1/admin/company", headers=headers)
    assert initial.status_code == 200
    assert initial.json()["data"]["name"] == "The Food City"

    updated = client.put(
        "/api/v1/admin/company",
        json={"phone": "9825012345", "address": "Ring Road, Surat"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["message"] == "Company settings updated successfully"

    current = client.get("/api/v1/admin/company", headers=headers).json()["data"]
    assert current["name"] == "The Food City"
    assert current["phone"] == "9825012345"
    assert current["address"] == "Ring Road, Surat"

    bad_phone = client.put("/api/v1/admin/company", json={"phone": "12345"}, headers=headers)
    assert bad_phone.status_code == 422


def test_admin_lists_and_searches_customers(client: TestClient, db_session: Session):
    headers = _admin_headers(client, db_session)
    create_user(db_session, email="asha@example.com", phone="9876511111")
    create_user(db_session, email="vikram@example.com")

    everyone = client.get("/api/v1/admin/users", headers=headers).json()
    found = client.get("/api/v1/admin/users?search=asha", headers=headers).json()

    assert everyone["meta"]["total"] == 2
    assert [user["email"] for user in found["data"]] == ["asha@example.com"]
    assert found["data"][0]["is_blocked"] is False


def test_blocked_customer_cannot_login_or_use_session(client: TestClient, db_session: Session):
    admin_headers = _admin_headers(client, db_session)
    customer = create_user(db_session)
    customer_headers = auth_headers(client, customer)

    blocked = client.patch(f"/api/v1/admin/users/{customer.id}/block", headers=admin_headers)
    assert blocked.status_code == 200
    assert blocked.json()["data"]["is_blocked"] is True
    assert blocked.json()["message"] == "User blocked successfully"

    login = client.post("/api/v1/auth/login", json={"email": customer.email, "password": PASSWORD})
    assert login.status_code == 403
    assert login.json()["message"] == "Account is blocked"

    session_use = client.get("/api/v1/users/address", headers=customer_headers)
    assert session_use.status_code == 403

    unblocked = client.patch(f"/api/v1/admin/users/{customer.id}/block", headers=admin_headers)
    assert unblocked.json()["data"]["is_blocked"] is False
    assert client.get("/api/v1/users/address", headers=customer_headers).status_code == 200


def test_block_rejects_admins_and_unknown_users(client: TestClient, db_session: Session):
    admin = create_user(db_session, role=UserRole.ADMIN)
    headers = auth_headers(client, admin)

    self_block = client.patch(f"/api/v1/admin/users/{admin.id}/block", headers=headers)
    missing = client.patch("/api/v1/admin/users/9999/block", headers=headers)

    assert self_block.status_code == 400
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"
