"""Shared slowapi limiter, keyed on the client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from compliance.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
