"""
Domain error taxonomy.

Services and repositories raise these; only the API layer knows how
they map to HTTP (see trestle.api.errors).
"""


class TrestleError(Exception):
    """Base class for all expected application errors."""

    def __init__(self, detail: str, *, headers: dict[str, str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.headers = headers or {}


class NotFoundError(TrestleError):
    """The addressed resource or entity does not exist."""

    def __init__(self, resource: str, entity_id=None, *, detail: str | None = None):
        if detail is None:
            detail = (
                f"{resource} {entity_id} was not found"
                if entity_id is not None
                else f"Unknown resource: {resource}"
            )
        super().__init__(detail)
        self.resource = resource
        self.entity_id = entity_id


class ValidationError(TrestleError):
    """Input failed a version's validation rule set."""

    def __init__(self, errors: dict[str, list[str]], detail: str | None = None):
        super().__init__(detail or "One or more validation errors occurred.")
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]}, detail=message)


class BusinessRuleError(TrestleError):
    """Input is well-formed but violates a business rule."""

    def __init__(self, detail: str, *, rule: str | None = None):
        super().__init__(detail)
        self.rule = rule


class UnauthorizedError(TrestleError):
    """Missing or invalid bearer credentials."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class UnsupportedVersionError(TrestleError):
    """The requested API version is malformed, unknown or removed."""

    def __init__(self, token: str | None, resource: str | None = None,
                 supported: list[str] | None = None):
        supported = supported or []
        if resource:
            detail = f"API version '{token}' is not supported for resource '{resource}'"
        else:
            detail = f"API version '{token}' is not a valid version"
        if supported:
            detail += f". Supported versions: {', '.join(supported)}"
        headers = {"api-supported-versions": ", ".join(supported)} if supported else None
        super().__init__(detail, headers=headers)
        self.token = token
        self.resource = resource
        self.supported = supported


class LifecycleError(ValueError):
    """An illegal version lifecycle transition was requested."""
