import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ENTITLEMENT_VALIDATE_URL", None)

from decimal import Decimal

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from marketplace.api.routers.checkout import get_checkout_service
from marketplace.data.database import Base, SessionLocal, engine, get_db
from marketplace.data.models import UserModel, ProductModel, CartModel, CartItemModel, OrderModel
from marketplace.main import app
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.entitlement_client import EntitlementClient
from marketplace.utils.settings import EntitlementConfig

ENTITLEMENT_URL = "http://entitlements.test/validate"


class StubNotifier:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send_order_notification(self, user_id, order_id, total):
        if self.fail:
            raise ConnectionError("broker down")
        self.sent.append((user_id, order_id, total))


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text="", invalid_json=False):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json


class FakeTransport:
    """Podmiana requests.post w kliencie entitlement."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def entitlement_config():
    return EntitlementConfig()


@pytest.fixture
def notifier():
    return StubNotifier()


@pytest.fixture
def transport(monkeypatch):
    fake = FakeTransport(response=FakeResponse(json_data={}))
    monkeypatch.setattr("marketplace.services.entitlement_client.requests.post", fake)
    return fake


@pytest.fixture
def checkout_service(db, entitlement_config, notifier):
    return CheckoutService(
        db=db,
        entitlement_client=EntitlementClient(entitlement_config),
        notification_service=notifier,
    )


@pytest.fixture
def client(db, entitlement_config, notifier):
    def _service(session=Depends(get_db)):
        return CheckoutService(
            db=session,
            entitlement_client=EntitlementClient(entitlement_config),
            notification_service=notifier,
        )

    app.dependency_overrides[get_checkout_service] = _service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, user_id=1, wallet="0", rewards="0", employer_id="emp-1", employer_name="Acme"):
    user = UserModel(
        id=user_id,
        name=f"User {user_id}",
        wallet_balance=Decimal(wallet),
        rewards_balance=Decimal(rewards),
        employer_id=employer_id,
        employer_name=employer_name,
    )
    db.add(user)
    db.commit()
    return user


def make_product(
    db,
    product_id,
    price="999.00",
    stock=10,
    wallet_eligible=True,
    rewards_eligible=True,
    name=None,
    category="devices",
    benefit_program_id=None,
):
    product = ProductModel(
        id=product_id,
        name=name or f"Product {product_id}",
        category=category,
        price=Decimal(price),
        stock_quantity=stock,
        wallet_eligible=wallet_eligible,
        rewards_eligible=rewards_eligible,
        benefit_program_id=benefit_program_id,
    )
    db.add(product)
    db.commit()
    return product


def make_cart(db, user_id, lines):
    """lines: lista (product_id, quantity)."""
    cart = CartModel(user_id=user_id, status="ACTIVE")
    db.add(cart)
    db.flush()
    for product_id, quantity in lines:
        db.add(CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity))
    db.commit()
    return cart


def snapshot(db, user_id):
    """Stan kont, magazynu i koszykow do porownania przed/po."""
    db.expire_all()
    user = db.get(UserModel, user_id)
    return {
        "wallet": user.wallet_balance,
        "rewards": user.rewards_balance,
        "stock": {p.id: p.stock_quantity for p in db.query(ProductModel).all()},
        "carts": {c.id: c.status for c in db.query(CartModel).all()},
        "orders": db.execute(
            OrderModel.__table__.select()
        ).fetchall(),
    }
