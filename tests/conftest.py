from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from oceanview.core.config import settings
from oceanview.core.security import create_access_token, hash_password
from oceanview.db.session import Base, make_session_factory
from oceanview.schemas.enums import UserRole
from oceanview.schemas.user import UserCreate
from oceanview.storage.memory import MemStorage
from oceanview.storage.sql import SqlStorage

from factories import booking_create, cruise_create, destination_create, user_create

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock the stores read instead of the wall clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def storage(request, clock):
    """Every store test runs once per backend."""
    if request.param == "memory":
        return MemStorage(clock=clock)
    engine = request.getfixturevalue("sql_engine")
    return SqlStorage(make_session_factory(engine), clock=clock)


# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

# Hashing is deliberately slow; hash once per session.
_PASSWORD = "sunny-deck-42"
_PASSWORD_HASH = hash_password(_PASSWORD)


@pytest.fixture
def password():
    return _PASSWORD


@pytest.fixture
def api_storage(clock):
    return MemStorage(clock=clock)


@pytest.fixture
def app(api_storage):
    from oceanview.main import create_app

    return create_app(api_storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(api_storage):
    def _make(username: str, role: UserRole = UserRole.customer):
        return api_storage.create_user(UserCreate(
            username=username,
            email=f"{username}@example.com",
            password_hash=_PASSWORD_HASH,
            role=role,
            first_name=username.title(),
        ))

    return _make


def auth_header(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def customer(make_user):
    return make_user("alice")


@pytest.fixture
def other_customer(make_user):
    return make_user("bob")


@pytest.fixture
def staff(make_user):
    return make_user("carol", role=UserRole.staff)


@pytest.fixture
def customer_headers(customer):
    return auth_header(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_header(other_customer)


@pytest.fixture
def staff_headers(staff):
    return auth_header(staff)


@pytest.fixture
def webhook_secret(monkeypatch):
    monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", "whsec-test")
    return "whsec-test"


# ---------------------------------------------------------------------------
# Store fixtures shared by the backend tests
# ---------------------------------------------------------------------------


@pytest.fixture
def guest(storage):
    return storage.create_user(user_create())


@pytest.fixture
def cruise(storage):
    destination = storage.create_destination(destination_create())
    return storage.create_cruise(cruise_create(destination.id))


@pytest.fixture
def booking(storage, guest, cruise):
    return storage.create_booking(booking_create(guest.id, cruise.id, storage.today()))
