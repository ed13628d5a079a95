from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from app.domain.errors import InternalError, ServiceError


@contextmanager
def translate_failures(action: str, log: logging.Logger) -> Iterator[None]:
    """Let domain errors through; log anything else and surface it as InternalError."""
    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        log.exception("Error while trying to %s", action)
        raise InternalError(f"Failed to {action}") from exc
