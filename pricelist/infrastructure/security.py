"""Bearer token helpers.

Tokens are issued by the identity service; this service only verifies them.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable

from jose import JWTError, jwt

from pricelist.config import get_settings

_ALGORITHM = "HS256"


def create_access_token(
    *,
    subject: int | str,
    permissions: Iterable[str] = (),
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": str(subject), "permissions": list(permissions), "exp": expire}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


__all__ = ["create_access_token", "decode_access_token"]
