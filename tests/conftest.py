"""
Pytest configuration and fixtures for tests.

Ledger Store is an in-memory SQLite database, Session Store is fakeredis and
Celery runs tasks eagerly, so no external service is needed.
"""

import os

os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "1")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from storefront.data.database import Database
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.identity import GuestIdentity, UserIdentity
from storefront.services.session_store import SessionStore


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def database():
    """In-memory SQLite shared by every session of a single test."""
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def store(fake_redis):
    return SessionStore(fake_redis)


# ============================================================================
# Catalog / Identity Fixtures
# ============================================================================

@pytest.fixture
def products(db):
    """P1 full price, P2 discounted 20%, P3 low stock."""
    rows = [
        ProductModel(id=1, name="Linen Shirt", price=Decimal("100.00"), discount=Decimal("0"),
                     stock=10, category="shirts", sizes=["M", "L"]),
        ProductModel(id=2, name="Denim Jacket", price=Decimal("50.00"), discount=Decimal("20"),
                     stock=5, category="jackets", sizes=["L"]),
        ProductModel(id=3, name="Canvas Sneakers", price=Decimal("19.99"), discount=Decimal("15"),
                     stock=2, category="shoes", sizes=["42"], image="/img/sneakers.png"),
    ]
    db.add_all(rows)
    db.commit()
    return {p.id: p for p in rows}


@pytest.fixture
def user(db):
    u = UserModel(name="Test User", email="test@example.com")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def reviewer_id():
    return 900


@pytest.fixture
def guest():
    return GuestIdentity("guest_abc123_1700000000000")


@pytest.fixture
def member(user):
    return UserIdentity(user.id)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def client(database, store, products):
    """FastAPI test client with injected storage handles."""
    from storefront.main import create_app

    app = create_app(database=database, session_store=store)
    with TestClient(app) as test_client:
        yield test_client
