"""Rate limiting configuration using slowapi.

Module-level Limiter wired into the FastAPI app in main.py. Write endpoints
that hit the backend can tighten it with ``@limiter.limit("N/period")``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from leave_portal.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)
