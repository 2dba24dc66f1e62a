"""Version catalog: which API versions each resource on this host serves."""

from fastapi import APIRouter, Depends, Request

from trestle.core.security import get_identity

router = APIRouter(dependencies=[Depends(get_identity)])


@router.get("/versions")
async def list_versions(request: Request):
    """
    Get every hosted resource with its registered versions.

    Each version reports its lifecycle state (active, deprecated,
    removed) and which version requests without a version segment get.
    """
    registry = request.app.state.container.registry
    catalog = registry.describe()
    defaults = {}
    for resource in registry.resources():
        default = registry.default_for(resource)
        defaults[resource] = str(default) if default else None
    return {
        "default_policy": request.app.state.container.settings.DEFAULT_API_VERSION,
        "resources": {
            resource: {"default": defaults[resource], "versions": versions}
            for resource, versions in catalog.items()
        },
    }
