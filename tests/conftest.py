"""
Shared fixtures: a store rooted in a temp directory and an API client wired to it.
"""

import json

import pytest
from fastapi.testclient import TestClient

from fancms.core.dao import DocumentLocks, Repositories
from fancms.core.ratelimit import RateLimiter
from fancms.core.store import JsonStore


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def write_document(root, path, records):
    target = root / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(records), encoding="utf-8")


def read_document(root, path):
    return json.loads((root / path).read_text(encoding="utf-8"))


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path)


@pytest.fixture
def repos(store):
    return Repositories(store, DocumentLocks())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


@pytest.fixture
def client(tmp_path, limiter):
    """Test client whose store and rate limiter are swapped for test instances."""
    from fancms.api import main
    from fancms.api.deps import get_rate_limiter, get_store

    main.app.dependency_overrides[get_store] = lambda: JsonStore(tmp_path)
    main.app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
