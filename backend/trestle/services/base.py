"""
Generic CRUD service.

Each (resource, version) pair is a subclass of CrudService declaring its
model, codec, filters and business-rule hooks. Version variants of one
resource are siblings: v2 never inherits from v1, they only share this
base. The dispatch layer builds one instance per request around that
request's repository.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Mapping

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from trestle.core.database import MAX_INTEGER
from trestle.core.errors import BusinessRuleError, ValidationError
from trestle.core.logging import get_logger
from trestle.repositories.base import ModelT, Repository
from trestle.schemas.codec import DtoCodec

logger = get_logger(__name__)


@dataclass
class Page:
    items: list[BaseModel]
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.model_dump(mode="json") for item in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise ValueError(raw)


def parse_id(raw: str) -> int:
    value = int(raw)
    if not 1 <= value <= MAX_INTEGER:
        raise ValueError(raw)
    return value


def enum_filter(enum_cls: type[Enum]) -> Callable[[str], str]:
    """Filter coercion for a status-like column: the raw value must be a member."""
    def parse(raw: str) -> str:
        return enum_cls(raw).value
    return parse


def ensure_transition(
    label: str,
    transitions: Mapping[str, set[str]],
    current: str,
    target: str,
) -> None:
    """Raise BusinessRuleError unless current -> target is an allowed move."""
    if current == target:
        return
    if target not in transitions.get(current, set()):
        raise BusinessRuleError(
            f"{label} cannot move from '{current}' to '{target}'",
            rule="status_transition",
        )


def merge_payload(current: dict[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow-merge changes into current, merging nested objects one level deep."""
    merged = dict(current)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class CrudService(Generic[ModelT]):
    resource: ClassVar[str]
    version: ClassVar[str]
    model: ClassVar[type]
    codec: ClassVar[DtoCodec]
    # query parameter -> coercion applied to its raw string value
    filters: ClassVar[dict[str, Callable[[str], Any]]] = {}
    search_field: ClassVar[str | None] = None

    def __init__(self, repository: Repository[ModelT]):
        self.repository = repository
        self.log = logger.bind(resource=self.resource, version=self.version)

    @classmethod
    def for_session(cls, session: AsyncSession) -> "CrudService[ModelT]":
        return cls(Repository(session, cls.model, search_field=cls.search_field))

    def repository_for(self, model: type) -> Repository:
        """A repository for another entity, sharing this request's session."""
        return Repository(self.repository.session, model)

    # ─── Rule hooks ────────────────────────────────────────────

    async def before_create(self, fields: dict[str, Any]) -> None:
        """Apply business rules to a new entity's fields."""

    async def before_update(self, entity: ModelT, fields: dict[str, Any]) -> None:
        """Apply business rules to a change of an existing entity."""

    async def before_delete(self, entity: ModelT) -> None:
        """Apply business rules before an entity is removed."""

    async def ensure_unique(self, field: str, value: Any, exclude_id: int | None = None) -> None:
        if value is None:
            return
        if await self.repository.exists(exclude_id=exclude_id, **{field: value}):
            raise BusinessRuleError(
                f"A {self.resource[:-1]} with {field} '{value}' already exists",
                rule="unique",
            )

    async def ensure_reference(self, field: str, model: type, entity_id: int | None) -> None:
        """ValidationError on `field` if entity_id is set but does not exist."""
        if entity_id is None:
            return
        if not await self.repository_for(model).exists(id=entity_id):
            raise ValidationError.for_field(field, f"{model.__name__} {entity_id} does not exist")

    # ─── Operations ────────────────────────────────────────────

    def parse_filters(self, query: Mapping[str, str]) -> dict[str, Any]:
        unknown = sorted(set(query) - set(self.filters))
        if unknown:
            raise ValidationError(
                {name: [f"Unknown filter. Allowed filters: {sorted(self.filters)}"] for name in unknown}
            )
        parsed: dict[str, Any] = {}
        errors: dict[str, list[str]] = {}
        for name, raw in query.items():
            try:
                parsed[name] = self.filters[name](raw)
            except ValueError:
                errors[name] = [f"Invalid value: {raw!r}"]
        if errors:
            raise ValidationError(errors)
        return parsed

    async def list(
        self,
        query: Mapping[str, str] | None = None,
        *,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Page:
        filters = self.parse_filters(query or {})
        rows = await self.repository.list(filters, search=search, limit=limit, offset=offset)
        total = await self.repository.count(filters, search=search)
        return Page(
            items=[self.codec.dump(row) for row in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get(self, entity_id: int) -> BaseModel:
        entity = await self.repository.get(entity_id)
        return self.codec.dump(entity)

    async def create(self, payload: Any) -> BaseModel:
        fields = self.codec.fields(self.codec.validate(payload))
        await self.before_create(fields)
        entity = await self.repository.create(self.model(**fields))
        self.log.info("entity.created", entity_id=entity.id)
        return self.codec.dump(entity)

    async def replace(self, entity_id: int, payload: Any) -> BaseModel:
        """PUT: the payload is the complete representation for this version."""
        entity = await self.repository.get(entity_id)
        return await self._apply(entity, payload)

    async def patch(self, entity_id: int, payload: Any) -> BaseModel:
        """PATCH: the payload is merged into the current representation."""
        if not isinstance(payload, dict):
            raise ValidationError({"body": ["Request body must be a JSON object"]})
        entity = await self.repository.get(entity_id)
        current = self.codec.dump(entity).model_dump(mode="json")
        return await self._apply(entity, merge_payload(current, payload))

    async def delete(self, entity_id: int) -> None:
        entity = await self.repository.get(entity_id)
        await self.before_delete(entity)
        await self.repository.delete(entity_id)
        self.log.info("entity.deleted", entity_id=entity_id)

    async def _apply(self, entity: ModelT, payload: Any) -> BaseModel:
        fields = self.codec.fields(self.codec.validate(payload))
        await self.before_update(entity, fields)
        entity = await self.repository.update(entity.id, fields)
        self.log.info("entity.updated", entity_id=entity.id)
        return self.codec.dump(entity)
