"""
Users collection auth endpoints: password login (local accounts), logout, current user.
Sessions are the same cookie the OIDC callback issues.
"""
import logging

from fastapi import APIRouter, Cookie
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cms_server.config import SESSION_COOKIE_NAME
from cms_server.errors import StoreError
from cms_server.seed import verify_password
from cms_server.session import clear_session, create_session_token, decode_session_token, set_session_cookie
from cms_server.user_store import get_user_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users")


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
def login(body: LoginRequest):
    """Email + password login for users with a local password. OIDC-only users cannot log in here."""
    try:
        found = get_user_store().find({"email": body.email}, limit=1)
    except StoreError:
        logger.exception("Login lookup failed")
        return JSONResponse({"error": "Invalid credentials"}, status_code=401)
    user = found.docs[0] if found.docs else None
    if user is None or not user.password_hash or not verify_password(body.password, user.password_hash):
        logger.info("Password login failed for %s", body.email)
        return JSONResponse({"error": "Invalid credentials"}, status_code=401)

    token, exp = create_session_token(user)
    response = JSONResponse({"message": "Auth Passed", "user": user.public_dict(), "token": token, "exp": exp})
    set_session_cookie(response, token)
    logger.info("Password login ok: user id=%s", user.id)
    return response


@router.post("/logout")
def logout():
    response = JSONResponse({"success": True})
    clear_session(response)
    return response


@router.get("/me")
def me(payload_token: str | None = Cookie(None, alias=SESSION_COOKIE_NAME)):
    """Current user from the session cookie, or {"user": null}."""
    payload = decode_session_token(payload_token)
    if payload is None:
        return {"user": None}
    try:
        user = get_user_store().find_by_id(int(payload["sub"]))
    except (KeyError, TypeError, ValueError):
        return {"user": None}
    except StoreError:
        logger.exception("Session user lookup failed")
        return JSONResponse({"error": "Failed to load user"}, status_code=500)
    if user is None:
        return {"user": None}
    return {"user": user.public_dict(), "exp": payload.get("exp")}
