from typing import Any, Dict
from urllib.parse import urlparse
import socket

from storefront.config import RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, SUPABASE_URL
from storefront.infra.supabase_client import get_service_supabase

CHECKED_TABLES = ("orders", "user_profiles")


def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("*").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def health_supabase_info() -> Dict[str, Any]:
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info: Dict[str, Any] = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = get_service_supabase()
        for t in CHECKED_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info


def health_payments_info() -> Dict[str, Any]:
    # Ne jamais exposer les valeurs, seulement leur présence
    return {
        "razorpay_key_id": bool(RAZORPAY_KEY_ID),
        "razorpay_key_secret": bool(RAZORPAY_KEY_SECRET),
        "key_mode": ("test" if RAZORPAY_KEY_ID.startswith("rzp_test_") else "live" if RAZORPAY_KEY_ID else None),
    }
