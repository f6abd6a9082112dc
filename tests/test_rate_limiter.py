from unittest.mock import MagicMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from yogastudio import rate_limiter


@pytest.fixture(autouse=True)
def fresh_memory_cache():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


class TestCheckRateLimit:
    def test_allows_until_limit(self):
        results = [rate_limiter.check_rate_limit("forms:1.2.3.4", 3, 60) for _ in range(4)]

        assert [allowed for allowed, _, _ in results] == [True, True, True, False]
        assert results[-1][1] == 3
        assert 0 < results[-1][2] <= 60

    def test_keys_are_independent(self):
        rate_limiter.check_rate_limit("forms:a", 1, 60)
        allowed, count, _ = rate_limiter.check_rate_limit("forms:b", 1, 60)
        assert allowed is True
        assert count == 1

    def test_window_starts_from_redis_count(self):
        client = MagicMock()
        client.get.return_value = "5"
        client.ttl.return_value = 30

        allowed, count, ttl = rate_limiter.check_rate_limit("bookings:x", 5, 60, client)

        assert allowed is False
        assert count == 5
        assert ttl <= 30

    def test_syncs_count_to_redis(self):
        client = MagicMock()
        client.get.return_value = None

        rate_limiter.check_rate_limit("views:x", 10, 60, client)
        rate_limiter.memory_cache["views:x"]["last_redis_sync"] = 0
        rate_limiter.check_rate_limit("views:x", 10, 60, client)

        client.set.assert_called_with("views:x", 2, ex=60)

    def test_redis_errors_fall_back_to_memory(self):
        client = MagicMock()
        client.get.side_effect = ConnectionError("down")
        client.set.side_effect = ConnectionError("down")

        allowed, count, _ = rate_limiter.check_rate_limit("ratings:x", 2, 60, client)
        assert allowed is True
        assert count == 1

    def test_unexpected_failure_denies(self, monkeypatch):
        def broken():
            raise RuntimeError("boom")

        monkeypatch.setattr(rate_limiter, "cleanup_expired_cache", broken)

        assert rate_limiter.check_rate_limit("forms:x", 5, 60) == (False, 5, 0)


class TestDependency:
    def make_app(self, limit):
        app = FastAPI()
        limiter = rate_limiter.create_rate_limiter(limit=limit, window_seconds=60, key_prefix="test")

        @app.post("/ping")
        async def ping(_: None = Depends(limiter)):
            return {"ok": True}

        return TestClient(app)

    def test_disabled_never_limits(self, monkeypatch):
        monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", False)
        client = self.make_app(limit=1)
        assert all(client.post("/ping").status_code == 200 for _ in range(3))

    def test_exceeding_returns_429_with_retry_after(self, monkeypatch):
        monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: None)
        client = self.make_app(limit=2)

        assert client.post("/ping").status_code == 200
        assert client.post("/ping").status_code == 200
        response = client.post("/ping")

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) <= 60
        assert response.json()["detail"]["limit"] == 2

    def test_redis_connection_failure_is_503(self, monkeypatch):
        def unreachable():
            raise ConnectionError("no redis")

        monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(rate_limiter, "get_redis_client", unreachable)

        assert self.make_app(limit=5).post("/ping").status_code == 503

    def test_forwarded_for_header_keys_by_first_ip(self, monkeypatch):
        monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: None)
        client = self.make_app(limit=1)

        assert client.post("/ping", headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}).status_code == 200
        assert client.post("/ping", headers={"X-Forwarded-For": "10.0.0.3"}).status_code == 200
        assert "test:10.0.0.1" in rate_limiter.memory_cache
