import pytest

from app.core.config import Settings
from app.domain.policies import PermissiveTransitionPolicy, StrictTransitionPolicy, build_transition_policy


def test_route_prefix_combines_prefix_and_version(monkeypatch):
    monkeypatch.setenv("API_PREFIX", "/internal/")
    monkeypatch.setenv("API_VERSION", "v2")

    assert Settings().route_prefix == "/internal/v2"


def test_lists_and_flags_are_parsed(monkeypatch):
    monkeypatch.setenv("ALLOWED_SERVICES", "auth-service, billing-service ,")
    monkeypatch.setenv("SUBSCRIPTION_STRICT_TRANSITIONS", "yes")
    monkeypatch.setenv("ENVIRONMENT", "Production")

    settings = Settings()

    assert settings.allowed_services == ["auth-service", "billing-service"]
    assert settings.strict_status_transitions is True
    assert settings.is_production is True


def test_malformed_flag_fails_fast(monkeypatch):
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "sometimes")

    with pytest.raises(RuntimeError, match="NOTIFICATIONS_ENABLED"):
        Settings()


def test_transition_policy_selection():
    assert isinstance(build_transition_policy(True), StrictTransitionPolicy)
    assert isinstance(build_transition_policy(False), PermissiveTransitionPolicy)
