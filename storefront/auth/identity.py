"""
Identité de l'acheteur vue par le tunnel de commande.
L'authentification elle-même est externe (Supabase Auth); on n'en consomme que le résultat.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol
import logging

from starlette.concurrency import run_in_threadpool

from storefront.auth.repository import get_user_from_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> Optional["Identity"]:
        """Construit une identité depuis l'utilisateur normalisé (get_current_user / Supabase)."""
        if not user or not user.get("id"):
            return None
        metadata = user.get("user_metadata") or user.get("metadata") or {}
        return cls(
            id=str(user["id"]),
            email=str(user.get("email") or ""),
            name=user.get("full_name") or metadata.get("full_name") or metadata.get("name"),
            phone=user.get("phone") or metadata.get("phone"),
            metadata=dict(metadata),
        )


class IdentityProvider(Protocol):
    async def current_identity(self) -> Optional[Identity]: ...
    async def request_sign_in(self) -> None: ...


class StaticIdentityProvider:
    """Identité déjà résolue (ex: par require_user côté API)."""

    def __init__(self, identity: Optional[Identity] = None):
        self.identity = identity
        self.sign_in_requests = 0

    async def current_identity(self) -> Optional[Identity]:
        return self.identity

    async def request_sign_in(self) -> None:
        self.sign_in_requests += 1


class SupabaseIdentityProvider:
    """Résout l'identité à partir d'un access token Supabase; None si absent ou expiré."""

    def __init__(self, access_token: Optional[str], on_sign_in_required=None):
        self._token = access_token
        self._on_sign_in_required = on_sign_in_required

    async def current_identity(self) -> Optional[Identity]:
        if not self._token:
            return None
        try:
            user = await run_in_threadpool(get_user_from_access_token, self._token)
        except Exception:
            logger.exception("auth.identity.current_identity failed")
            return None
        return Identity.from_user(user)

    async def request_sign_in(self) -> None:
        if self._on_sign_in_required:
            await self._on_sign_in_required()
