"""Request-count limiter applied at the HTTP boundary"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from examprep.core.config import settings

# Coarse limit on every route via SlowAPIMiddleware; auth routes add AUTH_LIMIT
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

AUTH_LIMIT = settings.RATE_LIMIT_AUTH
