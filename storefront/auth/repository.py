from typing import Any, Dict
from storefront.infra.supabase_client import get_supabase


def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "phone": getattr(user, "phone", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}
