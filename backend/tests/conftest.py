"""Pytest configuration to ensure local testing defaults."""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# During pytest runs we force SQLAlchemy to use a local sqlite database so that tests
# do not require a running PostgreSQL server.
default_sqlite_url = f"sqlite:///{(BACKEND_DIR / 'tests' / 'test_freightdesk.db').resolve().as_posix()}"
os.environ.setdefault("DATABASE_URL", default_sqlite_url)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("NOTIFICATION_BACKEND", "memory")

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from freightdesk import models  # noqa: E402
from freightdesk.config import get_settings  # noqa: E402
from freightdesk.database import Base, SessionLocal, engine  # noqa: E402
from freightdesk.services.notifications import InMemoryNotificationSink, get_notification_sink  # noqa: E402
from freightdesk.statuses import ShippingType  # noqa: E402


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notification_sink():
    return InMemoryNotificationSink()


@pytest.fixture
def client(db_session, notification_sink):
    from freightdesk.main import app

    app.dependency_overrides[get_notification_sink] = lambda: notification_sink
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    settings = get_settings()

    def _headers(role: str, actor_id: int = 1, customer_id: int | None = None) -> dict:
        claims = {"sub": str(actor_id), "role": role}
        if customer_id is not None:
            claims["customer_id"] = customer_id
        token = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_customer(db_session):
    def _make(code: str = "LY-1001", usd: str = "0", lyd: str = "0", cny: str = "0", push_tokens=None):
        customer = models.Customer(
            name=f"Customer {code}",
            code=code,
            balance_usd=Decimal(usd),
            balance_lyd=Decimal(lyd),
            balance_cny=Decimal(cny),
            push_tokens=list(push_tokens or []),
        )
        db_session.add(customer)
        db_session.commit()
        return customer

    return _make


@pytest.fixture
def make_rate(db_session):
    def _make(rate_type: ShippingType = ShippingType.AIR, price: str = "8.00", name: str | None = None):
        rate = models.ShippingRate(
            type=rate_type,
            name=name or f"{rate_type.value} standard",
            price=Decimal(price),
            country="CHINA",
        )
        db_session.add(rate)
        db_session.commit()
        return rate

    return _make


@pytest.fixture
def make_order(db_session):
    def _make(tracking_number: str = "FD000001", customer=None, **fields):
        order = models.Order(
            tracking_number=tracking_number,
            name=fields.pop("name", "هاتف ذكي"),
            usd_price=fields.pop("usd_price", Decimal("120.00")),
            customer_id=customer.id if customer is not None else None,
            **fields,
        )
        db_session.add(order)
        db_session.commit()
        return order

    return _make
