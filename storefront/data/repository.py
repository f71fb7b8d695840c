"""
Façade générique d'accès aux collections (tables Supabase utilisées comme des collections de documents).

- Opérations: get_all, get_where, get_single, get_by_id, add, update, delete, get_ordered
- Conditions: [{"field": ..., "operator": "==", "value": ...}] (==, !=, <, <=, >, >=, in, array-contains)
- Écritures: updated_at estampillé à chaque écriture, created_at en plus à l'insertion
- Retour uniforme RepoResult(data, error): aucune exception pour les échecs attendus
  (introuvable, aucun résultat, erreur PostgREST); l'appelant teste result.error
- Le client supabase-py est bloquant: chaque execute() part dans le threadpool
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import logging

from postgrest.exceptions import APIError
from starlette.concurrency import run_in_threadpool

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module storefront.data.repository
UNIQUE_VIOLATION = "23505"

_OPERATORS = {
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
    "in": "in_",
    "array-contains": "contains",
}


class RepositoryError(Exception):
    """Erreur retournée (jamais levée) par la façade. code: code PostgREST/Postgres si connu."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Document not found"):
        super().__init__(message, code="not_found")


@dataclass
class RepoResult:
    data: Any = None
    error: Optional[RepositoryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Condition:
    field: str
    operator: str
    value: Any

    @classmethod
    def coerce(cls, raw: Union["Condition", Dict[str, Any]]) -> "Condition":
        if isinstance(raw, Condition):
            return raw
        return cls(field=str(raw.get("field") or ""), operator=str(raw.get("operator") or "=="), value=raw.get("value"))


ConditionLike = Union[Condition, Dict[str, Any]]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_code(exc: Exception) -> Optional[str]:
    # Code SQLSTATE porté par APIError, sinon recherché dans le message
    if isinstance(exc, APIError):
        code = exc.code
        if not code and exc.args and isinstance(exc.args[0], dict):
            code = exc.args[0].get("code")
        if code:
            return str(code)
    if UNIQUE_VIOLATION in str(exc):
        return UNIQUE_VIOLATION
    return None


def _apply_condition(query: Any, cond: Condition) -> Any:
    method_name = _OPERATORS.get(cond.operator)
    if not method_name or not cond.field:
        raise ValueError(f"Condition invalide: {cond.field!r} {cond.operator!r}")
    value = cond.value
    if method_name == "in_":
        value = list(value or [])
    elif method_name == "contains" and not isinstance(value, (list, tuple)):
        value = [value]
    return getattr(query, method_name)(cond.field, value)


class DataRepository:
    """
    Client bas niveau unique sur lequel reposent les repositories typés
    (OrderRepository, ProfileRepository).
    client_factory: fonction retournant un client supabase (par défaut: service-role).
    """

    def __init__(self, client_factory: Optional[Callable[[], Any]] = None):
        self._client_factory = client_factory

    def _table(self, collection: str) -> Any:
        factory = self._client_factory or supabase_client.get_service_supabase
        return factory().table(collection)

    @staticmethod
    async def _execute(query: Any) -> Any:
        return await run_in_threadpool(query.execute)

    @staticmethod
    def _failure(action: str, collection: str, exc: Exception) -> RepoResult:
        logger.exception("data.repository.%s failed collection=%s", action, collection)
        return RepoResult(error=RepositoryError(str(exc), code=_error_code(exc)))

    def _select_where(self, collection: str, conditions: Iterable[ConditionLike]) -> Any:
        query = self._table(collection).select("*")
        for raw in conditions or []:
            query = _apply_condition(query, Condition.coerce(raw))
        return query

    # --- Lectures ---

    async def get_all(self, collection: str) -> RepoResult:
        try:
            res = await self._execute(self._table(collection).select("*"))
            rows = res.data or []
            logger.debug("data.repository.get_all collection=%s rows=%s", collection, len(rows))
            return RepoResult(data=rows)
        except Exception as e:
            return self._failure("get_all", collection, e)

    async def get_where(self, collection: str, conditions: List[ConditionLike]) -> RepoResult:
        try:
            res = await self._execute(self._select_where(collection, conditions))
            return RepoResult(data=res.data or [])
        except Exception as e:
            return self._failure("get_where", collection, e)

    async def get_single(self, collection: str, conditions: List[ConditionLike]) -> RepoResult:
        result = await self.get_where(collection, conditions)
        if result.error:
            return result
        if result.data:
            return RepoResult(data=result.data[0])
        return RepoResult(error=NotFoundError())

    async def get_by_id(self, collection: str, doc_id: str) -> RepoResult:
        if not doc_id:
            return RepoResult(error=NotFoundError())
        try:
            res = await self._execute(self._table(collection).select("*").eq("id", doc_id).limit(1))
            rows = res.data or []
            if rows:
                return RepoResult(data=rows[0])
            logger.info("data.repository.get_by_id not found collection=%s id=%s", collection, doc_id)
            return RepoResult(error=NotFoundError())
        except Exception as e:
            return self._failure("get_by_id", collection, e)

    async def get_ordered(
        self,
        collection: str,
        order_field: str = "created_at",
        direction: str = "desc",
        limit: int = 10,
        conditions: Optional[List[ConditionLike]] = None,
    ) -> RepoResult:
        try:
            query = (
                self._select_where(collection, conditions or [])
                .order(order_field, desc=(direction != "asc"))
                .limit(limit)
            )
            res = await self._execute(query)
            return RepoResult(data=res.data or [])
        except Exception as e:
            return self._failure("get_ordered", collection, e)

    # --- Écritures ---

    async def add(self, collection: str, doc: Dict[str, Any]) -> RepoResult:
        stamp = now_iso()
        payload = {**doc, "created_at": stamp, "updated_at": stamp}
        try:
            res = await self._execute(self._table(collection).insert(payload))
            rows = res.data or []
            row = rows[0] if isinstance(rows, list) and rows else payload
            return RepoResult(data={**payload, **row})
        except Exception as e:
            return self._failure("add", collection, e)

    async def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> RepoResult:
        payload = {**patch, "updated_at": now_iso()}
        try:
            res = await self._execute(self._table(collection).update(payload).eq("id", doc_id))
            rows = res.data or []
            if isinstance(rows, list) and rows:
                return RepoResult(data=rows[0])
            return RepoResult(error=NotFoundError("Document not found for update"))
        except Exception as e:
            return self._failure("update", collection, e)

    async def delete(self, collection: str, doc_id: str) -> RepoResult:
        try:
            await self._execute(self._table(collection).delete().eq("id", doc_id))
            return RepoResult()
        except Exception as e:
            return self._failure("delete", collection, e)

    def from_(self, collection: str):
        """Adaptateur chaîné optionnel (select().eq().single() / execute())."""
        from storefront.data.query import TableQuery
        return TableQuery(self, collection)
