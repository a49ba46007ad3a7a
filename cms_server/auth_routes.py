"""
OIDC login for CMS users (Authorization Code + PKCE).
GET /api/auth/{provider}: new PKCE pair, verifier into an HTTP-only cookie, redirect to the provider.
GET /api/auth/{provider}/callback: exchange code, fetch claims, find-or-create the user, issue session.
"""
import logging

from fastapi import APIRouter, Cookie
from fastapi.responses import JSONResponse, RedirectResponse

from cms_server.config import (
    AUTHORIZATION_URL,
    CLIENT_ID,
    COOKIE_SECURE,
    DEFAULT_SCOPE,
    PKCE_COOKIE_MAX_AGE,
    PKCE_COOKIE_NAME,
    POST_LOGIN_REDIRECT_URL,
    PROVIDER_NAME,
    REDIRECT_URI,
)
from cms_server.errors import AuthFlowError
from cms_server.flow import CallbackFlow
from cms_server.pkce import build_authorize_url, generate_pkce
from cms_server.user_store import get_user_store

logger = logging.getLogger(__name__)
router = APIRouter()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/api/auth/{provider}")
def start_login(provider: str):
    """Redirect to the provider's authorize endpoint with an S256 challenge."""
    if provider != PROVIDER_NAME:
        return _error("Unknown provider", 404)
    try:
        code_verifier, code_challenge = generate_pkce()
        url = build_authorize_url(
            authorization_url=AUTHORIZATION_URL,
            client_id=CLIENT_ID,
            redirect_uri=REDIRECT_URI,
            scope=DEFAULT_SCOPE,
            code_challenge=code_challenge,
        )
    except Exception:
        logger.exception("Error during %s auth initiation", provider)
        return _error("Authentication failed", 500)

    response = RedirectResponse(url=url, status_code=302)
    response.set_cookie(
        PKCE_COOKIE_NAME,
        code_verifier,
        max_age=PKCE_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=COOKIE_SECURE,
    )
    return response


@router.get("/api/auth/{provider}/callback")
def login_callback(
    provider: str,
    code: str | None = None,
    pkce_code_verifier: str | None = Cookie(None),
):
    """
    Complete the login. 302 to the post-login URL with the session cookie on success;
    {"error": ...} with 400/500 otherwise. The PKCE cookie is deleted on every path.
    """
    if provider != PROVIDER_NAME:
        response = _error("Unknown provider", 404)
    else:
        flow = CallbackFlow(get_user_store)
        try:
            flow.run(code, pkce_code_verifier)
            response = RedirectResponse(url=POST_LOGIN_REDIRECT_URL, status_code=302)
            flow.complete(response)
        except AuthFlowError as e:
            logger.warning("%s callback failed in state %s: %s (%s)", provider, flow.state.value, type(e).__name__, e)
            response = _error(e.public_message, e.status_code)
        except Exception:
            logger.exception("Error during %s callback", provider)
            response = _error("Authentication failed", 500)
        else:
            logger.info("%s login ok: user id=%s", provider, flow.user.id)

    response.delete_cookie(PKCE_COOKIE_NAME, path="/", httponly=True, secure=COOKIE_SECURE)
    return response
