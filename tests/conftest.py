import os
import re

#konfiguracja musi byc ustawiona przed importem aplikacji
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MAIL_BACKEND"] = "console"
os.environ["OTP_BACKEND"] = "memory"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from marketplace.api.deps import get_mailer, get_otp_gate
from marketplace.data.database import Base, SessionLocal, engine
from marketplace.data.models import ProductModel, SellerModel
from marketplace.main import app
from marketplace.services.otp_service import InMemoryOtpStore, OtpGate
from marketplace.utils.security import hash_password


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body})

    def last_code(self, to: str) -> str:
        for message in reversed(self.sent):
            if message["to"] == to:
                return re.search(r"\b(\d{6})\b", message["body"]).group(1)
        raise AssertionError(f"no mail sent to {to}")


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def otp_gate():
    return OtpGate(InMemoryOtpStore())


@pytest.fixture
def client(mailer, otp_gate):
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_otp_gate] = lambda: otp_gate
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_seller(db):
    def _make(email="shop@example.com", password="seller-pass", store_name="Shop"):
        seller = SellerModel(
            name="Seller",
            store_name=store_name,
            email=email,
            password=hash_password(password),
        )
        db.add(seller)
        db.commit()
        return seller

    return _make


@pytest.fixture
def make_product(db, make_seller):
    state = {}

    def _make(name="Keyboard", price="10.00", category="electronics", seller=None, **extra):
        if seller is None:
            if "seller" not in state:
                state["seller"] = make_seller()
            seller = state["seller"]
        product = ProductModel(
            seller_id=seller.id,
            name=name,
            price=Decimal(price),
            stock=extra.pop("stock", 10),
            category=category,
            **extra,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def signup(client):
    def _signup(email="buyer@example.com", password="buyer-pass", name="Buyer"):
        return client.post(
            "/user/signup",
            data={"name": name, "email": email, "password": password, "phone": "123", "address": "Main St 1"},
            follow_redirects=False,
        )

    return _signup


@pytest.fixture
def login(client):
    def _login(email="buyer@example.com", password="buyer-pass"):
        return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)

    return _login


@pytest.fixture
def buyer(client, signup, login):
    signup()
    resp = login()
    assert resp.status_code == 303
    return client
