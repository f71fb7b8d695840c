import time

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from fastapi_limiter import FastAPILimiter

from storefront.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/api/create-razorpay-order", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def create_order():
        return {"ok": True}

    @app.post("/api/verify-razorpay-signature", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def verify():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_fallback_blocks_after_limit(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    codes = [client.post("/api/create-razorpay-order").status_code for _ in range(3)]

    assert codes == [200, 200, 429]


def test_limit_is_per_path_and_token(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    headers = {"Authorization": "Bearer some-session"}

    assert client.post("/api/create-razorpay-order", headers=headers).status_code == 200
    assert client.post("/api/create-razorpay-order", headers=headers).status_code == 200
    assert client.post("/api/create-razorpay-order", headers=headers).status_code == 429
    # Autre chemin: compteur indépendant
    assert client.post("/api/verify-razorpay-signature", headers=headers).status_code == 200
    # Autre session: compteur indépendant
    assert client.post("/api/create-razorpay-order", headers={"Authorization": "Bearer other"}).status_code == 200


def test_window_resets(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=1))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/api/create-razorpay-order").status_code == 200
    assert client.post("/api/create-razorpay-order").status_code == 429
    time.sleep(1.1)
    assert client.post("/api/create-razorpay-order").status_code == 200


def test_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1, seconds=60)
    client = TestClient(app)
    app.state.rate_limit_enabled = False

    assert all(client.post("/api/create-razorpay-order").status_code == 200 for _ in range(3))


def test_uninitialized_limiter_never_blocks(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(FastAPILimiter, "redis", None)
    client = TestClient(_make_app(times=1, seconds=60))

    assert client.post("/api/create-razorpay-order").status_code == 200
    assert client.post("/api/create-razorpay-order").status_code == 200


def test_health_info(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(FastAPILimiter, "redis", None)
    app = _make_app()
    client = TestClient(app)
    app.state.rate_limit_enabled = True

    info = client.get("/rl_info").json()
    assert info == {"enabled": True, "ready": False, "backend": None}

    monkeypatch.setattr(FastAPILimiter, "redis", object())
    monkeypatch.setenv("RATE_LIMIT_REDIS_URL", "redis://localhost:6379/0")
    info2 = client.get("/rl_info").json()
    assert info2["ready"] is True and info2["backend"] == "redis"
    assert info2["redis"] == {"scheme": "redis", "host": "localhost", "port": 6379}
