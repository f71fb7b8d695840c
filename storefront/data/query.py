"""
Adaptateur chaîné façon supabase-js au-dessus de DataRepository.
Conservé pour les appels existants; l'API principale reste celle des repositories typés.

    await repo.from_("orders").select().eq("user_email", email).execute()
    await repo.from_("orders").select().eq("id", order_id).single()
    await repo.from_("orders").update({"status": "shipped"}).eq("id", order_id).execute()

Une égalité sur "id" passe par la lecture/écriture directe par identifiant.
"""
from typing import Any, Dict, List, Optional, Union
import asyncio

from storefront.data.repository import Condition, DataRepository, NotFoundError, RepoResult, RepositoryError

# module storefront.data.query
DEFAULT_SCAN_LIMIT = 1000


class SelectQuery:
    def __init__(self, repo: DataRepository, collection: str):
        self._repo = repo
        self._collection = collection
        self._conditions: List[Condition] = []
        self._order_field: Optional[str] = None
        self._ascending = False
        self._limit: Optional[int] = None

    def eq(self, field: str, value: Any) -> "SelectQuery":
        self._conditions.append(Condition(field, "==", value))
        return self

    def order(self, field: str, ascending: bool = False) -> "SelectQuery":
        self._order_field = field
        self._ascending = ascending
        return self

    def limit(self, count: int) -> "SelectQuery":
        self._limit = count
        return self

    async def single(self) -> RepoResult:
        if len(self._conditions) == 1 and self._conditions[0].field == "id":
            return await self._repo.get_by_id(self._collection, self._conditions[0].value)
        return await self._repo.get_single(self._collection, self._conditions)

    async def execute(self) -> RepoResult:
        if self._order_field or self._limit is not None:
            return await self._repo.get_ordered(
                self._collection,
                self._order_field or "created_at",
                "asc" if self._ascending else "desc",
                self._limit if self._limit is not None else DEFAULT_SCAN_LIMIT,
                self._conditions,
            )
        if self._conditions:
            return await self._repo.get_where(self._collection, self._conditions)
        return await self._repo.get_all(self._collection)


class InsertQuery:
    def __init__(self, repo: DataRepository, collection: str, data: Union[Dict[str, Any], List[Dict[str, Any]]]):
        self._repo = repo
        self._collection = collection
        self._data = data

    async def execute(self) -> RepoResult:
        if isinstance(self._data, list):
            results = await asyncio.gather(*(self._repo.add(self._collection, d) for d in self._data))
            error = next((r.error for r in results if r.error), None)
            return RepoResult(data=[r.data for r in results], error=error)
        return await self._repo.add(self._collection, self._data)


class _FilteredWrite:
    """Base update/delete: exige une condition .eq() et résout l'identifiant si besoin."""

    def __init__(self, repo: DataRepository, collection: str):
        self._repo = repo
        self._collection = collection
        self._field: Optional[str] = None
        self._value: Any = None

    def eq(self, field: str, value: Any):
        self._field = field
        self._value = value
        return self

    async def _resolve_id(self) -> RepoResult:
        if self._field == "id":
            return RepoResult(data=self._value)
        found = await self._repo.get_single(self._collection, [Condition(self._field, "==", self._value)])
        if found.error:
            return RepoResult(error=found.error)
        return RepoResult(data=found.data.get("id"))


class UpdateQuery(_FilteredWrite):
    def __init__(self, repo: DataRepository, collection: str, patch: Dict[str, Any]):
        super().__init__(repo, collection)
        self._patch = patch

    async def execute(self) -> RepoResult:
        if not self._field:
            return RepoResult(error=RepositoryError("Update requires a condition (use .eq())"))
        target = await self._resolve_id()
        if target.error:
            if isinstance(target.error, NotFoundError):
                return RepoResult(error=NotFoundError("Document not found for update"))
            return target
        return await self._repo.update(self._collection, target.data, self._patch)


class DeleteQuery(_FilteredWrite):
    async def execute(self) -> RepoResult:
        if not self._field:
            return RepoResult(error=RepositoryError("Delete requires a condition (use .eq())"))
        target = await self._resolve_id()
        if target.error:
            if isinstance(target.error, NotFoundError):
                return RepoResult(error=NotFoundError("Document not found for deletion"))
            return target
        return await self._repo.delete(self._collection, target.data)


class TableQuery:
    def __init__(self, repo: DataRepository, collection: str):
        self._repo = repo
        self._collection = collection

    def select(self, fields: str = "*") -> SelectQuery:
        # Les documents sont toujours lus entiers; fields est accepté pour compatibilité
        return SelectQuery(self._repo, self._collection)

    def insert(self, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> InsertQuery:
        return InsertQuery(self._repo, self._collection, data)

    def update(self, patch: Dict[str, Any]) -> UpdateQuery:
        return UpdateQuery(self._repo, self._collection, patch)

    def delete(self) -> DeleteQuery:
        return DeleteQuery(self._repo, self._collection)
