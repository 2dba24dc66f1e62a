"""
Generic repository: uniform CRUD over any mapped entity.

Every operation is a coroutine the service layer awaits in order. There
is no caching and no transaction handling here; the dispatch handlers
commit and the request-scoped session (trestle.core.database.get_db)
rolls back on error. Writes flush so generated ids, server defaults and
integrity errors surface inside the call that caused them.
"""

from typing import Any, Generic, Mapping, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trestle.core.database import Base
from trestle.core.errors import NotFoundError
from trestle.services.normalization import normalize_search

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD facade for one entity type, keyed by integer id."""

    def __init__(self, session: AsyncSession, model: type[ModelT], search_field: str | None = None):
        self.session = session
        self.model = model
        self.search_field = search_field

    @property
    def name(self) -> str:
        return self.model.__name__

    # ─── Reads ─────────────────────────────────────────────────

    async def find(self, entity_id: int) -> ModelT | None:
        result = await self.session.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    async def get(self, entity_id: int) -> ModelT:
        entity = await self.find(entity_id)
        if entity is None:
            raise NotFoundError(self.name, entity_id)
        return entity

    async def list(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[ModelT]:
        query = self._filtered(select(self.model), filters, search)
        query = query.order_by(self.model.id).limit(limit).offset(offset)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: Mapping[str, Any] | None = None, *, search: str | None = None) -> int:
        query = self._filtered(select(func.count(self.model.id)), filters, search)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def exists(self, *, exclude_id: int | None = None, **criteria: Any) -> bool:
        """True if any row (other than exclude_id) matches all criteria."""
        query = select(self.model.id).limit(1)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        for field, value in criteria.items():
            query = query.where(getattr(self.model, field) == value)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    def _filtered(self, query, filters: Mapping[str, Any] | None, search: str | None):
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        if search and self.search_field:
            column = getattr(self.model, self.search_field)
            query = query.where(func.lower(column).contains(normalize_search(search), autoescape=True))
        return query

    # ─── Writes ────────────────────────────────────────────────

    async def create(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity_id: int, values: Mapping[str, Any]) -> ModelT:
        entity = await self.get(entity_id)
        for field, value in values.items():
            setattr(entity, field, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: int) -> None:
        entity = await self.get(entity_id)
        await self.session.delete(entity)
        await self.session.flush()
