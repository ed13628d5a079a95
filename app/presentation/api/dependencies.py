import logging
import secrets
from typing import Optional

from fastapi import Depends, Header

from ...core.config import Settings
from ...core.dependencies import get_settings
from ...domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def require_service_auth(
    x_api_key: Optional[str] = Header(default=None),
    x_service_name: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Inter-service trust boundary: returns the calling service name."""
    if not settings.internal_api_key and not settings.is_production:
        logger.warning("INTERNAL_API_KEY is not set; allowing unauthenticated access outside production")
        return x_service_name

    if not x_api_key:
        logger.warning("Request denied: missing API key")
        raise UnauthorizedError("API key is required")

    if not x_service_name or x_service_name not in settings.allowed_services:
        logger.warning("Request denied: service %s not allowed", x_service_name)
        raise UnauthorizedError("Service not authorized")

    if not settings.internal_api_key or not secrets.compare_digest(
        x_api_key.encode("utf-8"), settings.internal_api_key.encode("utf-8")
    ):
        logger.warning("Request denied: invalid API key from %s", x_service_name)
        raise UnauthorizedError("Invalid API key")

    logger.debug("Authorized request from service: %s", x_service_name)
    return x_service_name
