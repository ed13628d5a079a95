
import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_application
from app.core.config import Settings
from app.infrastructure.persistence.sqlite import SQLiteDatabase
from app.infrastructure.repositories.payment_repository import PaymentRepository
from app.infrastructure.repositories.subscription_repository import SubscriptionRepository
from app.infrastructure.repositories.user_repository import UserRepository

from .support import API_KEY


@pytest.fixture
def settings(monkeypatch, tmp_path):
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "database.db"))
    monkeypatch.setenv("INTERNAL_API_KEY", API_KEY)
    monkeypatch.setenv("ALLOWED_SERVICES", "auth-service,payment-service")
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")
    monkeypatch.setenv("SUBSCRIPTION_STRICT_TRANSITIONS", "false")
    monkeypatch.delenv("API_PREFIX", raising=False)
    monkeypatch.delenv("API_VERSION", raising=False)
    return Settings()


@pytest.fixture
def auth_headers():
    return {"X-API-Key": API_KEY, "X-Service-Name": "auth-service"}


@pytest.fixture
def client(settings):
    with TestClient(create_application(settings)) as test_client:
        yield test_client


@pytest.fixture
def database():
    db = SQLiteDatabase(":memory:")
    yield db
    db.close()


@pytest.fixture
def subscription_repository(database):
    return SubscriptionRepository(database)


@pytest.fixture
def payment_repository(database):
    return PaymentRepository(database)


@pytest.fixture
def user_repository(database):
    return UserRepository(database)
