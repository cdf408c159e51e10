from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import auth_headers, create_addon, create_address, create_product, create_user
from foodcity.models.cart import CartSnapshot
from foodcity.models.coupon import Coupon, DiscountType
from foodcity.models.order import Order, OrderStatus
from foodcity.models.payment import Payment, PaymentMethod
from foodcity.models.user import UserRole


def _fill_cart(client: TestClient, db: Session, headers: dict):
    product = create_product(db, price=200.0, customizable_options=[{"option": "Large", "price": 250.0}])
    addon = create_addon(db, price=30.0)
    client.post("/api/v1/cart/items", json={"product_id": product.id, "quantity": 2}, headers=headers)
    client.post(
        "/api/v1/cart/items",
        json={"product_id": product.id, "customization": {"option": "Large", "price": 250.0}},
        headers=headers,
    )
    client.post("/api/v1/cart/addons", json={"product_id": addon.id, "quantity": 2}, headers=headers)
    return product, addon


def test_place_online_order_from_cart(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    product, addon = _fill_cart(client, db_session, headers)

    response = client.post("/api/v1/orders/", json={"address_id": address.id}, headers=headers)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "Order created successfully. Complete payment to confirm."
    order = body["data"]
    assert order["order_number"].startswith("FOODCITY")
    assert order["status"] == "pending"
    assert order["payment_method"] == "online"
    assert order["subtotal"] == 710.0
    assert order["tax"] == 71.0
    assert order["delivery_charge"] == 40.0
    assert order["total_amount"] == 821.0
    assert order["total_items"] == 5
    assert [item["price"] for item in order["items"]] == [200.0, 250.0]
    assert order["items"][1]["customization"] == {"option": "Large", "price": 250.0}
    assert order["addons"][0]["addon_id"] == addon.id
    assert order["customer_pincode"] == "395007"

    assert db_session.query(CartSnapshot).filter(CartSnapshot.user_id == user.id).count() == 0
    cart = client.get("/api/v1/cart/", headers=headers).json()["data"]["cart"]
    assert cart["is_empty"] is True


def test_cod_order_is_confirmed_and_queues_email(client: TestClient, db_session: Session, queued_emails):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)

    response = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "payment_method": "cod"},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    assert response.json()["message"] == "Order placed successfully. Pay on delivery."
    order_id = response.json()["data"]["id"]
    assert response.json()["data"]["status"] == "confirmed"
    assert queued_emails == [order_id]

    payment = db_session.query(Payment).filter(Payment.order_id == order_id).first()
    assert payment.payment_method == PaymentMethod.COD


def test_order_with_coupon_consumes_usage(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    coupon = Coupon(code="FEAST10", discount_type=DiscountType.PERCENTAGE, discount_value=10.0, usage_limit=5)
    db_session.add(coupon)
    db_session.commit()
    _fill_cart(client, db_session, headers)

    summary = client.post("/api/v1/cart/summary", json={"coupon_code": "feast10"}, headers=headers)
    assert summary.status_code == 200, summary.text
    # Add-ons are not coupon-eligible: 10% of the 650 product total.
    assert summary.json()["data"]["coupon_discount"] == 65.0
    assert summary.json()["data"]["grand_total"] == 756.0

    response = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "coupon_code": "feast10"},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    order = response.json()["data"]
    assert order["coupon_code"] == "FEAST10"
    assert order["discount"] == 65.0
    assert order["total_amount"] == 756.0
    db_session.refresh(coupon)
    assert coupon.used_count == 1


def test_rejected_coupon_leaves_cart_intact(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)

    response = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "coupon_code": "GHOST"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired coupon"
    assert db_session.query(Order).count() == 0
    assert client.get("/api/v1/cart/", headers=headers).json()["data"]["cart"]["total_items"] == 5


def test_empty_cart_cannot_be_ordered(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)

    response = client.post("/api/v1/orders/", json={"address_id": address.id}, headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Cart is empty"


def test_foreign_address_is_rejected(client: TestClient, db_session: Session):
    owner = create_user(db_session)
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, owner.id)
    _fill_cart(client, db_session, headers)

    response = client.post("/api/v1/orders/", json={"address_id": address.id}, headers=headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Address not found"


def test_idempotency_key_replays_order(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)
    payload = {"address_id": address.id, "idempotency_key": str(uuid4())}

    first = client.post("/api/v1/orders/", json=payload, headers=headers)
    second = client.post("/api/v1/orders/", json=payload, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["message"] == "Order already exists"
    assert second.json()["data"]["order_number"] == first.json()["data"]["order_number"]
    assert db_session.query(Order).count() == 1


def test_customer_notes_are_sanitized(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)

    response = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "customer_notes": "<b>Extra</b> spicy<script>x</script>"},
        headers=headers,
    )

    assert response.status_code == 201
    assert "<" not in response.json()["data"]["customer_notes"]


def test_order_history_detail_and_tracking(client: TestClient, db_session: Session):
    user = create_user(db_session)
    other = create_user(db_session)
    headers = auth_headers(client, user)
    other_headers = auth_headers(client, other)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)
    order_number = client.post("/api/v1/orders/", json={"address_id": address.id}, headers=headers).json()["data"]["order_number"]

    history = client.get("/api/v1/orders/", headers=headers)
    assert [order["order_number"] for order in history.json()["data"]] == [order_number]

    detail = client.get(f"/api/v1/orders/{order_number}", headers=headers)
    assert detail.status_code == 200

    tracking = client.get(f"/api/v1/orders/{order_number}/tracking", headers=headers)
    assert tracking.json()["data"]["current_status"] == "pending"
    assert tracking.json()["data"]["status_history"][0]["new_status"] == "pending"

    hidden = client.get(f"/api/v1/orders/{order_number}", headers=other_headers)
    assert hidden.status_code == 404
    assert hidden.json()["message"] == "Order not found"


def test_cancel_order(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)
    order_number = client.post("/api/v1/orders/", json={"address_id": address.id}, headers=headers).json()["data"]["order_number"]

    cancelled = client.put(
        f"/api/v1/orders/{order_number}/cancel",
        json={"reason": "Ordered by mistake"},
        headers=headers,
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["status"] == "cancelled"
    assert cancelled.json()["data"]["cancellation_reason"] == "Ordered by mistake"

    again = client.put(f"/api/v1/orders/{order_number}/cancel", headers=headers)
    assert again.status_code == 400
    assert again.json()["message"] == "Order cannot be cancelled at this stage"


def test_admin_updates_order_status(client: TestClient, db_session: Session):
    user = create_user(db_session)
    admin = create_user(db_session, role=UserRole.ADMIN)
    headers = auth_headers(client, user)
    admin_headers = auth_headers(client, admin)
    address = create_address(db_session, user.id)
    _fill_cart(client, db_session, headers)
    order_id = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "payment_method": "cod"},
        headers=headers,
    ).json()["data"]["id"]

    listed = client.get("/api/v1/admin/orders?status=confirmed", headers=admin_headers)
    assert listed.status_code == 200
    assert listed.json()["meta"]["total"] == 1

    for new_status in ("preparing", "out_for_delivery", "delivered"):
        response = client.put(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": new_status},
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text

    locked = client.put(
        f"/api/v1/admin/orders/{order_id}/status",
        json={"status": "cancelled"},
        headers=admin_headers,
    )
    assert locked.status_code == 400

    detail = client.get(f"/api/v1/admin/orders/{order_id}", headers=admin_headers)
    statuses = [entry["new_status"] for entry in detail.json()["data"]["status_history"]]
    assert statuses == ["confirmed", "preparing", "out_for_delivery", "delivered"]
    assert db_session.get(Order, order_id).status == OrderStatus.DELIVERED


def test_coupon_is_rejected_for_addon_only_cart(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    address = create_address(db_session, user.id)
    coupon = Coupon(code="ALL10", discount_type=DiscountType.PERCENTAGE, discount_value=10.0, usage_limit=1)
    db_session.add(coupon)
    db_session.commit()
    addon = create_addon(db_session, price=30.0)
    client.post("/api/v1/cart/addons", json={"product_id": addon.id, "quantity": 2}, headers=headers)

    summary = client.post("/api/v1/cart/summary", json={"coupon_code": "ALL10"}, headers=headers)
    assert summary.status_code == 400
    assert summary.json()["message"] == "Coupon is not applicable to items in your cart"

    response = client.post(
        "/api/v1/orders/",
        json={"address_id": address.id, "coupon_code": "ALL10"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Coupon is not applicable to items in your cart"
    db_session.refresh(coupon)
    assert coupon.used_count == 0
    assert db_session.query(Order).count() == 0
