from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from storefront.utils import security as security_mod
from storefront.utils.security import COOKIE_NAME, determine_role, get_current_user, require_admin


def _make_app():
    app = FastAPI()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user

    @app.get("/admin")
    def admin(user=Depends(require_admin)):
        return {"ok": True}

    return app


def _fake_auth(monkeypatch, user):
    monkeypatch.setattr("storefront.auth.repository.get_user_from_access_token", lambda token: user)


def test_determine_role(monkeypatch):
    monkeypatch.setattr(security_mod, "ADMIN_EMAILS", ["boss@example.com"])
    assert determine_role("Boss@Example.com", None) == "admin"
    assert determine_role("x@y.z", {"role": "admin"}) == "admin"
    assert determine_role("x@y.z", {"role": "USER"}) == "user"
    assert determine_role(None, None) == "user"


def test_bearer_token(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b.co", "user_metadata": {"full_name": "A"}})
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok-123"})
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == "u1" and body["role"] == "user"
    assert body["user_metadata"] == {"full_name": "A"}


def test_cookie_token(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b.co", "user_metadata": {"role": "admin"}})
    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    r = client.get("/me")
    assert r.status_code == 200
    assert r.json()["role"] == "admin"


def test_missing_token_401():
    r = TestClient(_make_app()).get("/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authenticated"


def test_expired_session_401(monkeypatch):
    _fake_auth(monkeypatch, {"email": "x@y.z"})
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401


def test_auth_backend_error_401(monkeypatch):
    def _boom(token):
        raise RuntimeError("invalid JWT")
    monkeypatch.setattr("storefront.auth.repository.get_user_from_access_token", _boom)
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401


def test_require_admin(monkeypatch):
    client = TestClient(_make_app())
    _fake_auth(monkeypatch, {"id": "u1", "email": "someone@example.com", "user_metadata": {}})
    assert client.get("/admin", headers={"Authorization": "Bearer tok"}).status_code == 403

    _fake_auth(monkeypatch, {"id": "u1", "email": "x@y.z", "user_metadata": {"role": "admin"}})
    r_ok = client.get("/admin", headers={"Authorization": "Bearer tok"})
    assert r_ok.status_code == 200 and r_ok.json() == {"ok": True}
