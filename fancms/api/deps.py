"""
Request dependencies: store, repositories, rate limiter and caller identity.
Tests swap these through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from util.logging import logger
from ..core import config
from ..core.analytics import client_ip, hash_ip
from ..core.auth import Caller
from ..core.dao import Repositories
from ..core.errors import RateLimitedError, UnauthorizedError
from ..core.ratelimit import RateLimiter
from ..core.store import JsonStore


def get_store() -> JsonStore:
    return JsonStore(config.get_data_root())


def get_repositories(request: Request, store: JsonStore = Depends(get_store)) -> Repositories:
    return Repositories(store, request.app.state.document_locks)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_caller(x_user_id: Optional[str] = Header(None),
               x_user_role: Optional[str] = Header(None)) -> Optional[Caller]:
    """Identity as claimed by the client; absent when no user id is sent."""
    if not x_user_id or not x_user_id.strip():
        return None
    return Caller(user_id=x_user_id.strip(), role=(x_user_role or "AUTHOR").strip().upper())


def require_caller(caller: Optional[Caller] = Depends(get_caller)) -> Caller:
    if caller is None:
        raise UnauthorizedError("Unauthorized")
    return caller


def enforce_telemetry_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> str:
    """Reject over-limit clients before the store is touched. Returns the client IP."""
    ip = client_ip(request.headers)
    max_requests = config.RATE_LIMIT_MAX_REQUESTS
    window_ms = config.RATE_LIMIT_WINDOW_MS
    if not limiter.allow(ip, max_requests, window_ms):
        logger.log_rate_limit(hash_ip(ip), max_requests, window_ms)
        raise RateLimitedError("Rate limit exceeded", retry_after=max(1, window_ms // 1000))
    return ip
