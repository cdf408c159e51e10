from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import auth_headers, create_addon, create_address, create_product, create_user
from foodcity.tasks import email_tasks
from foodcity.utils.email_templates import order_confirmation_template


def _cod_order(client: TestClient, db: Session) -> int:
    user = create_user(db, email="diner@example.com")
    headers = auth_headers(client, user)
    address = create_address(db, user.id)
    product = create_product(db, title="Masala <Dosa>", price=120.0)
    addon = create_addon(db, title="Sambar", price=25.0)
    client.post("/api/v1/cart/items", json={"product_id": product.id}, headers=headers)
    client.post("/api/v1/cart/addons", json={"product_id": addon.id}, headers=headers)
    response = client.post("/api/v1/orders/", json={"address_id": address.id, "payment_method": "cod"}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def test_confirmation_template_lists_items_and_escapes_names(client: TestClient, db_session: Session):
    from foodcity.models.order import Order

    order = db_session.get(Order, _cod_order(client, db_session))

    html = order_confirmation_template(order)

    assert order.order_number in html
    assert "Masala &lt;Dosa&gt;" in html
    assert "Sambar" in html
    assert "Cash on delivery" in html


def test_send_order_confirmation_emails_customer(client: TestClient, db_session: Session, monkeypatch):
    order_id = _cod_order(client, db_session)
    sent = []
    monkeypatch.setattr("foodcity.db.session.SessionLocal", lambda: db_session)
    monkeypatch.setattr(email_tasks, "send_smtp_message", sent.append)

    email_tasks.send_order_confirmation(order_id)

    assert len(sent) == 1
    assert sent[0]["To"] == "diner@example.com"
    assert sent[0]["Subject"].startswith("Order Placed - FOODCITY")


def test_missing_order_sends_nothing(db_session: Session, monkeypatch):
    sent = []
    monkeypatch.setattr("foodcity.db.session.SessionLocal", lambda: db_session)
    monkeypatch.setattr(email_tasks, "send_smtp_message", sent.append)

    email_tasks.send_order_confirmation(424242)

    assert sent == []
