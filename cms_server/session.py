"""
CMS session: HS256 JWT in an HTTP-only cookie. Issued after OIDC or password login; read by /api/users/me.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Response

from cms_server.config import COOKIE_SECURE, SESSION_COOKIE_NAME, SESSION_SECRET, SESSION_TTL_SECONDS
from cms_server.user_store import UserRecord

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
_COLLECTION = "users"

_secret = SESSION_SECRET
if not _secret:
    _secret = secrets.token_urlsafe(48)
    logger.warning("SESSION_SECRET not set; using a random per-process secret (sessions end on restart)")


def create_session_token(user: UserRecord) -> tuple[str, int]:
    """Return (token, exp as unix seconds)."""
    now = datetime.now(timezone.utc)
    exp = int((now + timedelta(seconds=SESSION_TTL_SECONDS)).timestamp())
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "roles": list(user.roles),
        "collection": _COLLECTION,
        "iat": int(now.timestamp()),
        "exp": exp,
    }
    return jwt.encode(payload, _secret, algorithm=_ALGORITHM), exp


def decode_session_token(token: str | None) -> dict | None:
    """Verify signature and expiry. Returns payload or None."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, _secret, algorithms=[_ALGORITHM])
    except jwt.InvalidTokenError as e:
        logger.debug("Session token invalid: %s", e)
        return None
    if payload.get("collection") != _COLLECTION:
        return None
    return payload


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=SESSION_TTL_SECONDS,
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


def issue_session(response: Response, user: UserRecord) -> tuple[str, int]:
    """Sign a session token for user and set it as the session cookie on response."""
    token, exp = create_session_token(user)
    set_session_cookie(response, token)
    return token, exp


def clear_session(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, secure=COOKIE_SECURE, samesite="lax")
