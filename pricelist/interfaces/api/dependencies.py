"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from pricelist.config import get_settings
from pricelist.domain.entities import Actor
from pricelist.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_actor(token: str) -> Actor:
    """Build the :class:`Actor` described by a verified bearer token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized("Invalid credentials") from exc

    subject = payload.get("sub")
    try:
        actor_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise _unauthorized("Invalid credentials") from exc

    permissions = payload.get("permissions") or []
    if not isinstance(permissions, list):
        raise _unauthorized("Invalid credentials")

    return Actor(
        id=actor_id,
        email=payload.get("email"),
        permissions=frozenset(str(permission) for permission in permissions),
    )


def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """Return the caller identified by the bearer token."""

    return resolve_actor(token)


def require_import_permission(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Ensure the caller may run price-list imports."""

    if not actor.has_permission(get_settings().import_permission):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to manage price-list imports",
        )
    return actor


__all__ = [
    "get_current_actor",
    "oauth2_scheme",
    "require_import_permission",
    "resolve_actor",
]
