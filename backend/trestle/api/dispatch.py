"""
Version dispatch: one generic set of CRUD routes for every resource.

    /api/v{version}/{resource}[/{entity_id}]   explicit version
    /api/{resource}[/{entity_id}]              configured default version

Any segment after /api/ that starts with "v" or "V" and is followed by a
resource is a version segment. Only a lowercase "v" and a numeric token
parse; anything else (V1, vlatest, v1.0.0), and unknown or removed
versions, fail with 400 Unsupported API Version. Each request resolves to
a (service class, codec) pair, builds the service around the request's
session and writes the DTO back with version advisory headers.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Query, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.convertors import Convertor, register_url_convertor

from trestle.core.database import MAX_INTEGER, get_db
from trestle.core.security import get_identity
from trestle.core.versioning import Resolution

# Query parameters with a fixed meaning; all others are equality filters
RESERVED_PARAMS = {"limit", "offset", "search"}


class ApiVersionConvertor(Convertor):
    regex = r"[vV][^/]*"

    def convert(self, value: str) -> str:
        # "V1" keeps its prefix and fails to parse
        return value[1:] if value.startswith("v") else value

    def to_string(self, value: str) -> str:
        return f"v{value}"


class ResourceConvertor(Convertor):
    regex = r"[a-z][a-z0-9_-]*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("apiversion", ApiVersionConvertor())
register_url_convertor("resource", ResourceConvertor())

VERSIONED = "/api/{version:apiversion}/{resource:resource}"
UNVERSIONED = "/api/{resource:resource}"

router = APIRouter(dependencies=[Depends(get_identity)])


def resolve_version(request: Request, resource: str) -> Resolution:
    """Dependency: the versioned service for this request."""
    registry = request.app.state.container.registry
    return registry.resolve(resource, request.path_params.get("version"))


def version_headers(resolution: Resolution) -> dict[str, str]:
    headers = {
        "api-version": str(resolution.version),
        "api-supported-versions": ", ".join(str(v) for v in resolution.supported),
    }
    if resolution.deprecated:
        headers["api-deprecated-versions"] = ", ".join(str(v) for v in resolution.deprecated)
    if resolution.is_deprecated:
        headers["Deprecation"] = "true"
    return headers


def _respond(resolution: Resolution, content: Any, status_code: int = 200,
             extra_headers: dict[str, str] | None = None) -> JSONResponse:
    headers = version_headers(resolution)
    headers.update(extra_headers or {})
    return JSONResponse(content=content, status_code=status_code, headers=headers)


async def list_entities(
    request: Request,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    search: str | None = Query(None, description="Case-insensitive name search"),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    """List entities; unreserved query parameters are equality filters."""
    service = resolution.service_cls.for_session(db)
    filters = {k: v for k, v in request.query_params.items() if k not in RESERVED_PARAMS}
    page = await service.list(filters, search=search, limit=limit, offset=offset)
    return _respond(resolution, page.to_dict())


async def create_entity(
    payload: dict[str, Any] = Body(...),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    service = resolution.service_cls.for_session(db)
    dto = await service.create(payload)
    await db.commit()
    location = f"/api/v{resolution.version}/{resolution.resource}/{dto.id}"
    return _respond(
        resolution,
        dto.model_dump(mode="json"),
        status_code=201,
        extra_headers={"Location": location},
    )


async def get_entity(
    entity_id: int = Path(..., ge=1, le=MAX_INTEGER),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    service = resolution.service_cls.for_session(db)
    dto = await service.get(entity_id)
    return _respond(resolution, dto.model_dump(mode="json"))


async def replace_entity(
    entity_id: int = Path(..., ge=1, le=MAX_INTEGER),
    payload: dict[str, Any] = Body(...),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    """Full update: the body is the complete representation for this version."""
    service = resolution.service_cls.for_session(db)
    dto = await service.replace(entity_id, payload)
    await db.commit()
    return _respond(resolution, dto.model_dump(mode="json"))


async def patch_entity(
    entity_id: int = Path(..., ge=1, le=MAX_INTEGER),
    payload: dict[str, Any] = Body(...),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    """Partial update: the body is merged into the current representation."""
    service = resolution.service_cls.for_session(db)
    dto = await service.patch(entity_id, payload)
    await db.commit()
    return _respond(resolution, dto.model_dump(mode="json"))


async def delete_entity(
    entity_id: int = Path(..., ge=1, le=MAX_INTEGER),
    resolution: Resolution = Depends(resolve_version),
    db: AsyncSession = Depends(get_db),
):
    service = resolution.service_cls.for_session(db)
    await service.delete(entity_id)
    await db.commit()
    return Response(status_code=204, headers=version_headers(resolution))


# Versioned routes first: an explicit version always wins
for prefix, label in ((VERSIONED, "versioned"), (UNVERSIONED, "default_version")):
    item = prefix + "/{entity_id}"
    router.add_api_route(prefix, list_entities, methods=["GET"], name=f"list_{label}")
    router.add_api_route(prefix, create_entity, methods=["POST"], status_code=201,
                         name=f"create_{label}")
    router.add_api_route(item, get_entity, methods=["GET"], name=f"get_{label}")
    router.add_api_route(item, replace_entity, methods=["PUT"], name=f"replace_{label}")
    router.add_api_route(item, patch_entity, methods=["PATCH"], name=f"patch_{label}")
    router.add_api_route(item, delete_entity, methods=["DELETE"], status_code=204,
                         name=f"delete_{label}")
