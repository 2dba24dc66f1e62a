"""
Bearer token authentication.

The identity provider is external: it issues JWTs signed with a shared
secret. This module only accepts or rejects a token and exposes the
claims it carries.
"""

from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from trestle.core.config import Settings
from trestle.core.errors import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The caller, as asserted by a verified token."""
    subject: str
    claims: dict[str, Any] = field(default_factory=dict)


ANONYMOUS = Identity(subject="anonymous")


def decode_token(token: str, settings: Settings) -> Identity:
    """Verify a JWT and return the identity it carries."""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except JWTError as exc:
        raise UnauthorizedError(f"Invalid token: {exc}") from exc

    subject = claims.get("sub")
    if not subject:
        raise UnauthorizedError("Token has no subject claim")
    return Identity(subject=str(subject), claims=claims)


async def get_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """FastAPI dependency: the verified caller, or ANONYMOUS when auth is off."""
    settings: Settings = request.app.state.container.settings
    if not settings.AUTH_ENABLED:
        return ANONYMOUS
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing bearer token")
    return decode_token(credentials.credentials, settings)
