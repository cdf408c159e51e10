from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import auth_headers, create_user
from foodcity.models.coupon import Coupon, DiscountType
from foodcity.models.user import UserRole
from foodcity.services.coupon_service import CouponService, calculate_discount


def _coupon(db: Session, code: str = "SAVE10", **overrides) -> Coupon:
    values = {
        "code": code,
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": 10.0,
        "applicable_product_ids": [],
        "is_active": True,
    }
    values.update(overrides)
    coupon = Coupon(**values)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


def _items(*lines):
    return [{"id": product_id, "price": price, "quantity": quantity} for product_id, price, quantity in lines]


def test_percentage_discount_only_counts_applicable_items():
    coupon = SimpleNamespace(
        discount_type=DiscountType.PERCENTAGE,
        discount_value=20.0,
        applicable_product_ids=[1],
    )

    discount = calculate_discount(coupon, _items((1, 100.0, 2), (2, 50.0, 1)))

    assert discount == pytest.approx(40.0)


def test_fixed_discount_is_per_unit_and_capped():
    coupon = SimpleNamespace(discount_type=DiscountType.FIXED, discount_value=30.0, applicable_product_ids=[])

    assert calculate_discount(coupon, _items((1, 100.0, 2))) == pytest.approx(60.0)
    assert calculate_discount(coupon, _items((1, 20.0, 1))) == pytest.approx(20.0)


def test_no_eligible_items_means_no_discount():
    coupon = SimpleNamespace(discount_type=DiscountType.FIXED, discount_value=30.0, applicable_product_ids=[9])

    assert calculate_discount(coupon, _items((1, 100.0, 1))) == 0.0


def test_quote_normalizes_code(db_session: Session):
    coupon = _coupon(db_session)

    quote = CouponService.quote(db_session, "  save10 ", _items((1, 100.0, 3)))

    assert quote.coupon_id == coupon.id
    assert quote.coupon_code == "SAVE10"
    assert quote.discount_amount == pytest.approx(30.0)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"is_active": False}, "Invalid or expired coupon"),
        ({"end_date": datetime.utcnow() - timedelta(days=1)}, "Coupon has expired"),
        ({"start_date": datetime.utcnow() + timedelta(days=1)}, "Coupon is not active yet"),
        ({"usage_limit": 2, "used_count": 2}, "Coupon usage limit exceeded"),
        ({"applicable_product_ids": [42]}, "Coupon is not applicable to items in your cart"),
    ],
)
def test_quote_rejections(db_session: Session, overrides, message):
    _coupon(db_session, **overrides)

    with pytest.raises(HTTPException) as exc_info:
        CouponService.quote(db_session, "SAVE10", _items((1, 100.0, 1)))

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == message


def test_unknown_code_is_rejected(db_session: Session):
    with pytest.raises(HTTPException) as exc_info:
        CouponService.quote(db_session, "NOPE", _items((1, 100.0, 1)))

    assert exc_info.value.detail == "Invalid or expired coupon"


def test_quote_does_not_consume_usage(db_session: Session):
    coupon = _coupon(db_session, usage_limit=1)

    CouponService.quote(db_session, "SAVE10", _items((1, 100.0, 1)))
    CouponService.quote(db_session, "SAVE10", _items((1, 100.0, 1)))
    db_session.refresh(coupon)

    assert coupon.used_count == 0


def test_consume_counts_one_use(db_session: Session):
    coupon = _coupon(db_session, usage_limit=1)

    CouponService.consume(db_session, coupon.id)
    db_session.commit()
    db_session.refresh(coupon)

    assert coupon.used_count == 1
    with pytest.raises(HTTPException):
        CouponService.consume(db_session, coupon.id)


def test_apply_coupon_endpoint(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    _coupon(db_session, code="FLAT50", discount_type=DiscountType.FIXED, discount_value=50.0)

    response = client.post(
        "/api/v1/coupons/apply",
        json={"coupon_code": "flat50", "cart_items": _items((1, 200.0, 2))},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Coupon applied successfully"
    assert body["data"]["discount_amount"] == 100.0
    assert body["data"]["coupon_code"] == "FLAT50"


def test_apply_coupon_rejection_uses_error_envelope(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)
    _coupon(db_session, end_date=datetime.utcnow() - timedelta(hours=1))

    response = client.post(
        "/api/v1/coupons/apply",
        json={"coupon_code": "SAVE10", "cart_items": _items((1, 200.0, 1))},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["message"] == "Coupon has expired"


def test_apply_coupon_requires_cart_items(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)

    response = client.post("/api/v1/coupons/apply", json={"coupon_code": "SAVE10", "cart_items": []}, headers=headers)

    assert response.status_code == 422


def test_admin_coupon_crud(client: TestClient, db_session: Session):
    admin = create_user(db_session, role=UserRole.ADMIN)
    headers = auth_headers(client, admin)

    created = client.post(
        "/api/v1/coupons/",
        json={"code": " welcome20 ", "discount_type": "percentage", "discount_value": 20},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    coupon_id = created.json()["data"]["id"]
    assert created.json()["data"]["code"] == "WELCOME20"

    duplicate = client.post(
        "/api/v1/coupons/",
        json={"code": "WELCOME20", "discount_type": "percentage", "discount_value": 5},
        headers=headers,
    )
    assert duplicate.status_code == 400

    too_much = client.put(f"/api/v1/coupons/{coupon_id}", json={"discount_value": 150}, headers=headers)
    assert too_much.status_code == 400

    updated = client.put(f"/api/v1/coupons/{coupon_id}", json={"is_active": False}, headers=headers)
    assert updated.json()["data"]["is_active"] is False

    listed = client.get("/api/v1/coupons/", headers=headers)
    assert [coupon["code"] for coupon in listed.json()["data"]] == ["WELCOME20"]

    deleted = client.delete(f"/api/v1/coupons/{coupon_id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/v1/coupons/{coupon_id}", headers=headers).status_code == 404


def test_coupon_admin_routes_reject_customers(client: TestClient, db_session: Session):
    user = create_user(db_session)
    headers = auth_headers(client, user)

    response = client.get("/api/v1/coupons/", headers=headers)

    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"


def test_quote_rejects_when_no_line_is_eligible(db_session: Session):
    _coupon(db_session)

    with pytest.raises(HTTPException) as exc_info:
        CouponService.quote(db_session, "SAVE10", [])

    assert exc_info.value.detail == "Coupon is not applicable to items in your cart"
