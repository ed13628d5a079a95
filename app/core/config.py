import os
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.environment = os.getenv("ENVIRONMENT", "development").lower()
        database_path = os.getenv("DATABASE_PATH", "data/database.db")
        self.database_path: Union[Path, str] = (
            database_path if database_path == ":memory:" else Path(database_path).resolve()
        )
        self.api_prefix = "/" + os.getenv("API_PREFIX", "/api").strip("/")
        self.api_version = os.getenv("API_VERSION", "v1").strip("/")
        self.internal_api_key = os.getenv("INTERNAL_API_KEY") or None
        self.allowed_services = self._get_list("ALLOWED_SERVICES", ["auth-service"])
        self.notification_service_url = os.getenv("NOTIFICATION_SERVICE_URL", "http://localhost:3002")
        self.notification_service_api_key = os.getenv("NOTIFICATION_SERVICE_API_KEY", "default-api-key")
        self.notifications_enabled = self._get_bool("NOTIFICATIONS_ENABLED", default=True)
        self.strict_status_transitions = self._get_bool("SUBSCRIPTION_STRICT_TRANSITIONS", default=False)
        self.notification_shutdown_timeout = self._get_int("NOTIFICATION_SHUTDOWN_TIMEOUT", default=20)
        self.cors_allow_origins = self._get_list("CORS_ALLOW_ORIGINS", ["*"])

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def route_prefix(self) -> str:
        return f"{self.api_prefix.rstrip('/')}/{self.api_version}"

    @staticmethod
    def _get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if not value:
            return list(default)
        return [item.strip() for item in value.split(",") if item.strip()]

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise RuntimeError(f"Environment variable {key} must be a boolean")

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
