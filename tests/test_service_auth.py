import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_application
from app.core.config import Settings

from .support import API_KEY

URL = "/api/v1/subscriptions/user/user-1/active"


def test_valid_credentials_pass(client, auth_headers):
    assert client.get(URL, headers=auth_headers).status_code == 200


@pytest.mark.parametrize(
    "headers, message",
    [
        ({"X-Service-Name": "auth-service"}, "API key is required"),
        ({"X-API-Key": API_KEY}, "Service not authorized"),
        ({"X-API-Key": API_KEY, "X-Service-Name": "billing-ui"}, "Service not authorized"),
        ({"X-API-Key": "wrong", "X-Service-Name": "auth-service"}, "Invalid API key"),
    ],
)
def test_rejected_credentials(client, headers, message):
    response = client.get(URL, headers=headers)

    assert response.status_code == 401
    assert response.json() == {"statusCode": 401, "message": message, "error": "Unauthorized"}


def test_every_service_router_is_guarded(client):
    for method, path in (
        ("get", "/api/v1/subscriptions"),
        ("get", "/api/v1/payments"),
        ("put", "/api/v1/users/user-1/contact"),
    ):
        assert getattr(client, method)(path).status_code == 401, path


def test_health_is_public(client):
    assert client.get("/health").status_code == 200


def test_missing_key_allows_access_outside_production(settings, monkeypatch):
    monkeypatch.delenv("INTERNAL_API_KEY")
    with TestClient(create_application(Settings())) as open_client:
        assert open_client.get(URL).status_code == 200


def test_missing_key_denies_access_in_production(settings, monkeypatch):
    monkeypatch.delenv("INTERNAL_API_KEY")
    monkeypatch.setenv("ENVIRONMENT", "production")
    with TestClient(create_application(Settings())) as closed_client:
        response = closed_client.get(URL, headers={"X-API-Key": "anything", "X-Service-Name": "auth-service"})

    assert response.status_code == 401
