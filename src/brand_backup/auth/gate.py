"""Authorization gate shared by the export and import entry points.

The identity provider is an external collaborator reached through the
``AuthService`` protocol.  The role check lives in one place,
``authorize``, and both entry points call it the same way.

Usage:
    from brand_backup.auth.gate import authorize, extract_bearer

    token = extract_bearer(request.headers.get("Authorization"))
    caller = await auth_service.resolve_caller(token)
    authorize(caller, {"admin", "developer"})
"""

from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel

from brand_backup.errors import AuthError

DEFAULT_ALLOWED_ROLES: frozenset[str] = frozenset({"admin", "developer"})


class Caller(BaseModel):
    """Identity resolved from a bearer credential."""

    id: str
    role: str | None = None


class AuthService(Protocol):
    """Resolves a bearer credential to a ``Caller``."""

    async def resolve_caller(self, token: str) -> Caller:
        """Return the caller owning ``token``.

        Raises:
            AuthError: If the token is invalid (401) or the caller's
                permissions cannot be read (403).
        """
        ...


def extract_bearer(header: str | None) -> str:
    """Return the credential from an ``Authorization`` header value.

    The ``Bearer`` prefix is optional.

    Raises:
        AuthError: If the header is missing or empty (401).
    """
    if not header or not header.strip():
        raise AuthError("Missing authorization header", status_code=401)
    token = header.strip()
    if token.lower() == "bearer" or token.lower().startswith("bearer "):
        token = token[len("bearer"):].strip()
    if not token:
        raise AuthError("Missing authorization header", status_code=401)
    return token


def authorize(
    caller: Caller,
    required_roles: Iterable[str] = DEFAULT_ALLOWED_ROLES,
    action: str = "access backups",
) -> Caller:
    """Check that ``caller`` holds one of ``required_roles``.

    Returns:
        The same caller, for chaining.

    Raises:
        AuthError: With status 403 when the role is not allowed.
    """
    if caller.role not in set(required_roles):
        raise AuthError(
            f"Forbidden: your role ({caller.role}) cannot {action}",
            status_code=403,
        )
    return caller
