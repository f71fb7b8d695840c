from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, Request

from storefront.config import ADMIN_EMAILS

COOKIE_NAME = "sb_access"


def determine_role(email: Optional[str], metadata: Optional[Dict[str, Any]]) -> str:
    """admin si l'email figure dans ADMIN_EMAILS ou si la metadata Supabase porte role=admin."""
    if email and email.lower() in ADMIN_EMAILS:
        return "admin"
    if str((metadata or {}).get("role", "")).lower() == "admin":
        return "admin"
    return "user"


def extract_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME)


def get_current_user(request: Request) -> Dict[str, Any]:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        from storefront.auth.repository import get_user_from_access_token
        user = get_user_from_access_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")

    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    metadata = user.get("user_metadata") or {}
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "phone": user.get("phone"),
        "user_metadata": metadata,
        "role": determine_role(user.get("email"), metadata),
    }


def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Forbidden")
    return user
