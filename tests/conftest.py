import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.core.config import settings
from app.core.database import Base
from app.core.security import create_access_token
from app.main import app
from app.models import Product, User
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.services.notifications import notifier

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []
    monkeypatch.setattr(notifier, "send", sent.append)
    return sent


@pytest.fixture
def client(db, sent_emails):
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def upi_settings(monkeypatch):
    monkeypatch.setattr(settings, "UPI_ID", "mirajcandles@okaxis")
    monkeypatch.setattr(settings, "PAYEE_NAME", "Miraj Candles")
    return settings


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=ROLE_USER, **fields):
        counter["n"] += 1
        data = {
            "email": f"{role}{counter['n']}@example.com",
            "name": f"{role.title()} {counter['n']}",
            "phone": "9876543210",
            "hashed_password": "not-a-real-hash",
            "role": role,
            "street": "12 MG Road",
            "city": "Pune",
            "state": "Maharashtra",
            "zip_code": "411001",
        }
        data.update(fields)
        db_user = User(**data)
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        return db_user

    return _make_user


@pytest.fixture
def buyer(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role=ROLE_ADMIN)


@pytest.fixture
def make_product(db):
    def _make_product(name="Lavender Candle", price="100.00", stock_quantity=10, sales=0, **fields):
        db_product = Product(
            name=name,
            description=f"{name} description",
            category="Candles",
            price=Decimal(price),
            stock_quantity=stock_quantity,
            sales=sales,
            in_stock=stock_quantity > 0,
            **fields,
        )
        db.add(db_product)
        db.commit()
        db.refresh(db_product)
        return db_product

    return _make_product


@pytest.fixture
def auth_headers():
    def _auth_headers(db_user):
        return {"Authorization": f"Bearer {create_access_token(db_user.email)}"}

    return _auth_headers


@pytest.fixture
def submit_transaction(client, auth_headers):
    """Envía un id de transacción UPI con el carrito dado, como lo hace el checkout."""

    def _submit(db_user, lines, amount=None, txn_id="UTR4471203398", **extra):
        items = [
            {"productId": db_product.id, "quantity": quantity, "price": str(price)}
            for db_product, quantity, price in lines
        ]
        if amount is None:
            amount = sum(Decimal(str(price)) * quantity for _, quantity, price in lines)
        payload = {"amount": str(amount), "txnId": txn_id, "items": items}
        payload.update(extra)
        return client.post("/api/verify-upi-payment", json=payload, headers=auth_headers(db_user))

    return _submit


@pytest.fixture
def verify_payment(client, auth_headers):
    def _verify(db_admin, order_id, **body):
        return client.put(
            f"/api/admin/verify-payment/{order_id}",
            json=body or None,
            headers=auth_headers(db_admin),
        )

    return _verify
