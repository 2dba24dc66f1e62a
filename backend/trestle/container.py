"""
Explicit wiring of the dependency graph for one host process.

Order matters:
  1. settings
  2. database engine and session factory
  3. version lifecycle (from configuration)
  4. registry of versioned services for the hosted domains

The container is built once at startup and hung on app.state; request
handlers reach it through the request, never through globals.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from trestle.core.config import Settings
from trestle.core.database import build_engine, build_sessionmaker
from trestle.core.logging import get_logger
from trestle.core.versioning import VersionLifecycle, VersionRegistry
from trestle.services.logistics import OrderServiceV1, OrderServiceV2, ShipmentServiceV1
from trestle.services.materials import MaterialServiceV1, MaterialServiceV2, SupplierServiceV1
from trestle.services.projects import MilestoneServiceV1, ProjectServiceV1, ProjectServiceV2

logger = get_logger(__name__)

# Bounded domain -> the versioned services its host exposes
DOMAIN_SERVICES: dict[str, list[type]] = {
    "projects": [ProjectServiceV1, ProjectServiceV2, MilestoneServiceV1],
    "materials": [MaterialServiceV1, MaterialServiceV2, SupplierServiceV1],
    "logistics": [OrderServiceV1, OrderServiceV2, ShipmentServiceV1],
}


@dataclass
class Container:
    settings: Settings
    engine: AsyncEngine
    sessionmaker: async_sessionmaker[AsyncSession]
    registry: VersionRegistry


def build_registry(settings: Settings) -> VersionRegistry:
    lifecycle = VersionLifecycle.from_config(settings.VERSION_LIFECYCLE)
    registry = VersionRegistry(lifecycle, default_version=settings.DEFAULT_API_VERSION)
    for domain in settings.HOST_DOMAINS:
        for service_cls in DOMAIN_SERVICES[domain]:
            registry.register(service_cls)
    return registry


def build_container(settings: Settings) -> Container:
    engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    registry = build_registry(settings)
    logger.info(
        "container.built",
        domains=settings.HOST_DOMAINS,
        resources=registry.resources(),
        default_version=settings.DEFAULT_API_VERSION,
    )
    return Container(
        settings=settings,
        engine=engine,
        sessionmaker=build_sessionmaker(engine),
        registry=registry,
    )
