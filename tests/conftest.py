import os
import tempfile
from collections.abc import Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("DATABASE_URL", "sqlite:///./foodcity-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-foodcity-suite-0001")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_foodcity")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "razorpay-test-secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "razorpay-webhook-secret")

import foodcity.models  # noqa: F401
from foodcity.core.security import hash_password
from foodcity.db.base_class import Base
from foodcity.db.session import get_db
from foodcity.main import app
from foodcity.models.addon import AddOn
from foodcity.models.address import Address
from foodcity.models.product import FoodCategory, Product
from foodcity.models.user import User, UserRole

PASSWORD = "StrongPass1"


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    db_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    db_file.close()

    engine = create_engine(
        f"sqlite:///{db_file.name}",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        os.unlink(db_file.name)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def queued_emails(monkeypatch) -> list:
    from foodcity.tasks import email_tasks

    queued = []
    monkeypatch.setattr(email_tasks.send_order_confirmation, "delay", lambda order_id: queued.append(order_id))
    return queued


class FakeRazorpayOrders:
    def __init__(self):
        self.created = []

    def create(self, data: dict) -> dict:
        self.created.append(data)
        return {"id": f"order_test{len(self.created)}", "amount": data["amount"], "currency": data["currency"]}


class FakeRazorpayClient:
    def __init__(self):
        self.order = FakeRazorpayOrders()


@pytest.fixture()
def razorpay_client(monkeypatch) -> FakeRazorpayClient:
    from foodcity.services import payment_service

    fake = FakeRazorpayClient()
    monkeypatch.setattr(payment_service, "razorpay_client", fake)
    return fake


def create_user(db: Session, email: str = None, phone: str = None, role: UserRole = UserRole.CUSTOMER) -> User:
    suffix = uuid4().hex[:8]
    user = User(
        email=email or f"user-{suffix}@example.com",
        full_name="Test Customer",
        phone=phone,
        password_hash=hash_password(PASSWORD),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(client: TestClient, user: User) -> dict:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": user.email, "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    # Login also sets a cookie, which would win over the bearer header.
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


def create_product(
    db: Session,
    title: str = "Paneer Tikka",
    price: float = 100.0,
    discounted_price: float = None,
    customizable_options: list = None,
    is_available: bool = True,
) -> Product:
    product = Product(
        title=title,
        slug=f"{title.lower().replace(' ', '-')}-{uuid4().hex[:6]}",
        description=f"{title} from the tandoor",
        price=price,
        discounted_price=discounted_price,
        category=FoodCategory.TANDOOR,
        is_available=is_available,
        is_customizable=bool(customizable_options),
        customizable_options=customizable_options or [],
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def create_addon(db: Session, title: str = "Butter Naan", price: float = 30.0) -> AddOn:
    addon = AddOn(
        title=title,
        description=f"{title} add-on",
        price=price,
        is_veg=True,
    )
    db.add(addon)
    db.commit()
    db.refresh(addon)
    return addon


def create_address(db: Session, user_id: int) -> Address:
    address = Address(
        user_id=user_id,
        full_name="Test Customer",
        phone="9876543210",
        address_line1="12 MG Road",
        city="Surat",
        state="Gujarat",
        pincode="395007",
        is_default=True,
        address_type="home",
    )
    db.add(address)
    db.commit()
    db.refresh(address)
    return address
