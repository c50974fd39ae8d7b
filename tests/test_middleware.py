import time

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.middleware import RateLimitMiddleware


def _app(limit, login_limit):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit_per_minute=limit, login_limit_per_minute=login_limit)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    @app.post("/api/v1/auth/login")
    def login():
        return {"ok": True}

    return app


def test_global_limit():
    client = TestClient(_app(limit=3, login_limit=10))
    assert [client.get("/ping").status_code for _ in range(4)] == [200, 200, 200, 429]
    assert client.get("/ping").json() == {"error": "Too many requests. Please try again later."}


def test_login_limit_is_stricter():
    client = TestClient(_app(limit=10, login_limit=2))
    codes = [client.post("/api/v1/auth/login").status_code for _ in range(3)]
    assert codes == [200, 200, 429]


def test_expired_entries_are_forgotten():
    limiter = RateLimitMiddleware(FastAPI(), limit_per_minute=5)
    now = time.time()
    limiter.requests["10.0.0.1"] = [now - 120, now - 90]
    limiter.requests["10.0.0.2"] = [now - 200]
    limiter.requests["10.0.0.3"] = [now - 5]

    assert limiter._recent("10.0.0.1", now) == []
    assert "10.0.0.1" not in limiter.requests

    limiter._sweep(now)
    assert list(limiter.requests) == ["10.0.0.3"]


def test_idle_client_does_not_keep_a_key():
    app = _app(limit=5, login_limit=5)
    client = TestClient(app)
    client.get("/ping")

    limiter = app.middleware_stack
    while not isinstance(limiter, RateLimitMiddleware):
        limiter = limiter.app
    assert len(limiter.requests["testclient"]) == 1

    limiter.requests["testclient"] = [time.time() - 61]
    limiter._sweep(time.time())
    assert limiter.requests == {}
