"""
API versions, their lifecycle, and resolution of (resource, version) pairs.

A version tag selects exactly one service variant (and with it one DTO
codec) per resource. Tags are ordered: 1.0 < 1.1 < 2.0.

Lifecycle per (resource, version):

    ACTIVE -> DEPRECATED -> REMOVED

Deprecated versions still resolve but responses carry an advisory
marker. Removed versions fail resolution exactly like unknown ones.
Transitions are made by operators through configuration and never move
backwards.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from trestle.core.errors import LifecycleError, NotFoundError, UnsupportedVersionError

_VERSION_PATTERN = re.compile(r"^v?(\d{1,4})(?:\.(\d{1,4}))?$")


@dataclass(frozen=True, order=True)
class ApiVersion:
    """An ordered major.minor API version tag."""
    major: int
    minor: int = 0

    @classmethod
    def parse(cls, token: str) -> "ApiVersion":
        """
        Parse a version token.

        '1' -> 1.0, '1.0' -> 1.0, 'v2.1' -> 2.1. Anything else
        (including '1.0.0', '', 'latest') raises UnsupportedVersionError.
        """
        match = _VERSION_PATTERN.match(token.strip()) if token else None
        if not match:
            raise UnsupportedVersionError(token)
        return cls(int(match.group(1)), int(match.group(2) or 0))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class VersionState(str, Enum):
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    REMOVED = "removed"


_STATE_RANK = {
    VersionState.ACTIVE: 0,
    VersionState.DEPRECATED: 1,
    VersionState.REMOVED: 2,
}


class VersionLifecycle:
    """Lifecycle state per (resource, version). Unlisted pairs are ACTIVE."""

    def __init__(self) -> None:
        self._states: dict[tuple[str, ApiVersion], VersionState] = {}

    @classmethod
    def from_config(cls, config: dict[str, dict[str, str]]) -> "VersionLifecycle":
        """Build from the VERSION_LIFECYCLE setting: {resource: {version: state}}."""
        lifecycle = cls()
        for resource, versions in config.items():
            for token, state in versions.items():
                lifecycle.transition(resource, ApiVersion.parse(token), VersionState(state.lower()))
        return lifecycle

    def state(self, resource: str, version: ApiVersion) -> VersionState:
        return self._states.get((resource, version), VersionState.ACTIVE)

    def transition(self, resource: str, version: ApiVersion, target: VersionState) -> VersionState:
        """Move a pair forward in its lifecycle. Moving backwards raises LifecycleError."""
        current = self.state(resource, version)
        if _STATE_RANK[target] < _STATE_RANK[current]:
            raise LifecycleError(
                f"{resource} v{version} cannot move from {current.value} to {target.value}"
            )
        self._states[(resource, version)] = target
        return target

    def deprecate(self, resource: str, version: ApiVersion) -> VersionState:
        return self.transition(resource, version, VersionState.DEPRECATED)

    def remove(self, resource: str, version: ApiVersion) -> VersionState:
        return self.transition(resource, version, VersionState.REMOVED)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a request to a versioned service."""
    resource: str
    version: ApiVersion
    state: VersionState
    service_cls: Any
    supported: tuple[ApiVersion, ...]
    deprecated: tuple[ApiVersion, ...]

    @property
    def codec(self):
        return self.service_cls.codec

    @property
    def is_deprecated(self) -> bool:
        return self.state is VersionState.DEPRECATED


class VersionRegistry:
    """
    Maps (resource, version) to exactly one service class.

    Service classes expose ``resource``, ``version`` and ``codec`` class
    attributes. The registry never instantiates them; the dispatch layer
    does, once per request, with that request's repository.
    """

    def __init__(self, lifecycle: VersionLifecycle | None = None, default_version: str = "latest"):
        self.lifecycle = lifecycle or VersionLifecycle()
        self.default_version = (
            None if default_version == "latest" else ApiVersion.parse(default_version)
        )
        self._services: dict[str, dict[ApiVersion, Any]] = {}

    def register(self, service_cls: Any) -> Any:
        version = ApiVersion.parse(service_cls.version)
        versions = self._services.setdefault(service_cls.resource, {})
        if version in versions:
            raise ValueError(
                f"{service_cls.resource} v{version} is already registered "
                f"to {versions[version].__name__}"
            )
        versions[version] = service_cls
        return service_cls

    def resources(self) -> list[str]:
        return sorted(self._services)

    def versions(self, resource: str) -> list[ApiVersion]:
        return sorted(self._services.get(resource, {}))

    def available(self, resource: str) -> list[ApiVersion]:
        """Registered versions that are not removed, ascending."""
        return [
            v for v in self.versions(resource)
            if self.lifecycle.state(resource, v) is not VersionState.REMOVED
        ]

    def resolve(self, resource: str, token: str | None = None) -> Resolution:
        """Select the service for a resource and an optional version token."""
        if resource not in self._services:
            raise NotFoundError(resource)

        available = self.available(resource)
        supported = [str(v) for v in available]

        if token is None:
            version = self._default_for(available)
            if version is None:
                raise UnsupportedVersionError(
                    str(self.default_version or "latest"), resource, supported
                )
        else:
            try:
                version = ApiVersion.parse(token)
            except UnsupportedVersionError:
                raise UnsupportedVersionError(token, resource, supported) from None
            if version not in available:
                raise UnsupportedVersionError(token, resource, supported)

        deprecated = tuple(
            v for v in available
            if self.lifecycle.state(resource, v) is VersionState.DEPRECATED
        )
        return Resolution(
            resource=resource,
            version=version,
            state=self.lifecycle.state(resource, version),
            service_cls=self._services[resource][version],
            supported=tuple(available),
            deprecated=deprecated,
        )

    def default_for(self, resource: str) -> ApiVersion | None:
        """The version a request without a version segment resolves to."""
        return self._default_for(self.available(resource))

    def _default_for(self, available: list[ApiVersion]) -> ApiVersion | None:
        if self.default_version is None:
            return available[-1] if available else None
        eligible = [v for v in available if v <= self.default_version]
        return eligible[-1] if eligible else None

    def describe(self) -> dict[str, list[dict[str, str]]]:
        """All resources with their versions and lifecycle states."""
        return {
            resource: [
                {
                    "version": str(v),
                    "state": self.lifecycle.state(resource, v).value,
                    "service": self._services[resource][v].__name__,
                }
                for v in self.versions(resource)
            ]
            for resource in self.resources()
        }
