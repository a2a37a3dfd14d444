from __future__ import annotations

import logging

from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address

from inspectform.config import Settings
from inspectform.errors import RateLimitError

logger = logging.getLogger(__name__)


class RequestLimiter:
    """Fixed-window request counter shared by every route, keyed by client IP."""

    def __init__(self, limit: str, enabled: bool = True) -> None:
        self.limit = parse(limit)
        self.enabled = enabled
        self._storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self, key: str) -> bool:
        return self._strategy.hit(self.limit, key)

    def reset(self) -> None:
        self._storage.reset()


def create_limiter(settings: Settings) -> RequestLimiter:
    return RequestLimiter(settings.rate_limit, enabled=settings.rate_limit_enabled)


async def enforce_rate_limit(request: Request) -> None:
    # Installed as an app-wide dependency so routers included later are counted too.
    limiter: RequestLimiter = request.app.state.limiter
    if not limiter.enabled:
        return
    client = get_remote_address(request)
    if not limiter.hit(client):
        logger.warning("Rate limit exceeded for %s on %s", client, request.url.path)
        raise RateLimitError()
