"""
Session identity for interactive callers (dashboard users).

A session is a signed JWT whose `sub` claim is the tenant id. Decoding
never raises: a missing, expired or tampered token simply yields no
identity, and the tenant resolver decides what that means.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=12)


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """Claims of a verified session token."""

    subject: str
    email: str | None = None
    name: str | None = None


def issue_session_token(
    subject: str,
    secret_key: str,
    algorithm: str = "HS256",
    *,
    email: str | None = None,
    name: str | None = None,
    expires_in: timedelta = DEFAULT_SESSION_TTL,
) -> str:
    """Sign a session JWT for `subject`. Used by tooling and tests."""
    now = datetime.now(timezone.utc)
    claims: dict[str, object] = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_in,
    }
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def decode_session_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> SessionIdentity | None:
    """Verify a session JWT. Returns None on any failure."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        logger.debug("Rejected session token")
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None

    return SessionIdentity(
        subject=subject,
        email=payload.get("email"),
        name=payload.get("name"),
    )
