import os
import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Isolate all tests to a throwaway SQLite database
TEST_INSTANCE_DIR = ROOT_DIR / ".pytest-instance"
TEST_INSTANCE_DIR.mkdir(parents=True, exist_ok=True)
TEST_DB_PATH = TEST_INSTANCE_DIR / "test.sqlite"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH.as_posix()}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ALGORITHM"] = "HS256"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import core.model  # noqa: E402,F401  registers the tables on Base
from core.auth import create_context_token  # noqa: E402
from core.events import EventDispatcher  # noqa: E402
from core.system_config import SystemConfigService  # noqa: E402
from core.wishlist import WISHLIST_ENABLED_CONFIG  # noqa: E402
from db.session import Base, SessionLocal, engine, get_db  # noqa: E402
from main import app  # noqa: E402
import factories  # noqa: E402


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def dispatcher(monkeypatch):
    """Fresh dispatcher wired into the wishlist route"""
    fresh = EventDispatcher()
    monkeypatch.setattr("routers.wishlist.event_dispatcher", fresh)
    return fresh


@pytest.fixture
def client(db_session, dispatcher):  # noqa: ARG001 - isolates listeners per test
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def store(db_session):
    """Customer C1 in channel S1 with wishlist W1 holding P1 (newest) and P2.

    P3 is visible in S1 but not wishlisted.
    """
    s1 = factories.create_sales_channel(db_session, name="S1", access_key="SWS1ACCESSKEY")
    s2 = factories.create_sales_channel(db_session, name="S2", access_key="SWS2ACCESSKEY")
    c1 = factories.create_customer(db_session, sales_channel=s1)
    p1 = factories.create_product(db_session, name="P1", visible_in=(s1,))
    p2 = factories.create_product(db_session, name="P2", visible_in=(s1,))
    p3 = factories.create_product(db_session, name="P3", visible_in=(s1,))
    w1 = factories.create_wishlist(
        db_session,
        customer=c1,
        products=((p2, datetime(2024, 1, 1)), (p1, datetime(2024, 1, 2))),
    )
    db_session.commit()

    SystemConfigService(db_session).set(WISHLIST_ENABLED_CONFIG, True, s1.id)

    return SimpleNamespace(s1=s1, s2=s2, c1=c1, w1=w1, p1=p1, p2=p2, p3=p3)


@pytest.fixture
def auth_headers():
    def _headers(sales_channel, customer=None):
        headers = {"sw-access-key": sales_channel.access_key}
        if customer is not None:
            token = create_context_token(customer.id, sales_channel.id)
            headers["Authorization"] = f"Bearer {token}"
        return headers

    return _headers
