"""
DTO codecs: one per (resource, version).

A codec owns a version's wire contract:
  - create_schema: the declarative rule set for incoming bodies
  - read_schema:   the response shape
  - to_fields:     DTO -> entity column values
  - to_dto:        entity -> response DTO

Fields a version does not know about never appear in to_fields, so a
write through an old version leaves newer columns untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import pydantic
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel

from trestle.core.errors import ValidationError


def collect_errors(exc: pydantic.ValidationError | RequestValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into {"field.path": [messages]}."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        message = err["msg"]
        # pydantic prefixes model_validator errors with "Value error, "
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors


def _dump_fields(dto: BaseModel) -> dict[str, Any]:
    return dto.model_dump()


@dataclass(frozen=True)
class DtoCodec:
    create_schema: type[BaseModel]
    read_schema: type[BaseModel]
    to_fields: Callable[[BaseModel], dict[str, Any]] = _dump_fields
    to_dto: Callable[[Any], BaseModel] | None = None

    def validate(self, payload: Any) -> BaseModel:
        """Run the version's rule set. Raises ValidationError with a field map."""
        if not isinstance(payload, dict):
            raise ValidationError({"body": ["Request body must be a JSON object"]})
        try:
            return self.create_schema.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ValidationError(collect_errors(exc)) from exc

    def fields(self, dto: BaseModel) -> dict[str, Any]:
        """Entity column values for a validated DTO, enums unwrapped to their values."""
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in self.to_fields(dto).items()
        }

    def dump(self, entity: Any) -> BaseModel:
        """Project an entity onto this version's response DTO."""
        if self.to_dto is not None:
            return self.to_dto(entity)
        return self.read_schema.model_validate(entity)
