def test_health_root(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_health_supabase(client, monkeypatch):
    monkeypatch.setattr("storefront.health.router.health_supabase_info", lambda: {"connect_ok": True, "tables": {}})
    r = client.get("/health/supabase")
    assert r.status_code == 200
    assert r.json()["connect_ok"] is True


def test_health_ratelimit_disabled_in_tests(client):
    r = client.get("/health/ratelimit")
    assert r.status_code == 200
    assert r.json()["enabled"] is False


def test_health_payments_never_leaks_keys(client, monkeypatch):
    monkeypatch.setattr("storefront.health.service.RAZORPAY_KEY_ID", "rzp_test_abc")
    monkeypatch.setattr("storefront.health.service.RAZORPAY_KEY_SECRET", "secret")
    body = client.get("/health/payments").json()
    assert body == {"razorpay_key_id": True, "razorpay_key_secret": True, "key_mode": "test"}
