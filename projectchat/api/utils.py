from datetime import datetime, timedelta, timezone

import jwt

from projectchat.database.config.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Issue a signed JWT.

    Parameters
    ----------
    data : dict
        Claims to embed; `sub` must hold the user id.
    expires_delta : timedelta, optional
        Lifetime of the token. Defaults to `ACCESS_TOKEN_EXPIRE_MINUTES`.

    Returns
    -------
    str
        The encoded token.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> str | None:
    """
    Validate a JWT and return its subject.

    Returns
    -------
    str | None
        The user id stored in `sub`, or None if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None
    return payload.get("sub")


def redact_token(token: str | None, keep: int = 20) -> str:
    """Shorten a secret so it can appear in a log line."""
    if not token:
        return "<none>"
    if len(token) <= keep:
        return "..."
    return f"{token[:keep]}..."
