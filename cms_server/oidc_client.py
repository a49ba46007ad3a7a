"""
Calls to the identity provider: authorization code -> access token, access token -> userinfo claims.
Single-shot (codes are one-time use, so no retries) with a bounded timeout. Upstream bodies are logged,
never returned to the browser.
"""
import logging

import httpx

from cms_server.config import CLIENT_ID, CLIENT_SECRET, OIDC_HTTP_TIMEOUT, REDIRECT_URI, TOKEN_URL, USERINFO_URL
from cms_server.errors import BadRequest, UpstreamTokenError, UpstreamUserInfoError

logger = logging.getLogger(__name__)


def _ok(r) -> bool:
    return 200 <= r.status_code < 300


def exchange_code(code: str | None, code_verifier: str | None) -> str:
    """
    POST the authorization_code grant (confidential client + PKCE verifier) to the token endpoint.
    Returns the access_token. Raises BadRequest before any network call if code or verifier is missing.
    """
    if not code or not code_verifier:
        raise BadRequest("code and code_verifier are required")

    try:
        r = httpx.post(
            TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "client_id": CLIENT_ID,
                "client_secret": CLIENT_SECRET,
                "code": code,
                "redirect_uri": REDIRECT_URI,
                "code_verifier": code_verifier,
            },
            headers={"Accept": "application/json"},
            timeout=OIDC_HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        logger.error("Token request to %s failed: %s", TOKEN_URL, e)
        raise UpstreamTokenError(str(e)) from e

    if not _ok(r):
        logger.error("Failed to exchange authorization code for access token (status=%s): %s", r.status_code, r.text)
        raise UpstreamTokenError(f"token endpoint returned {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        logger.error("Token endpoint returned non-JSON body: %s", r.text)
        raise UpstreamTokenError("token response is not JSON") from e

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token:
        logger.error("Token response has no access_token (keys=%s)", sorted(data) if isinstance(data, dict) else type(data).__name__)
        raise UpstreamTokenError("token response has no access_token")
    return access_token


def fetch_userinfo(access_token: str) -> dict:
    """GET the userinfo endpoint with the bearer token. Returns the raw claims object."""
    try:
        r = httpx.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            timeout=OIDC_HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        logger.error("Userinfo request to %s failed: %s", USERINFO_URL, e)
        raise UpstreamUserInfoError(str(e)) from e

    if not _ok(r):
        logger.error("Failed to fetch user info (status=%s): %s", r.status_code, r.text)
        raise UpstreamUserInfoError(f"userinfo endpoint returned {r.status_code}")

    try:
        claims = r.json()
    except ValueError as e:
        logger.error("Userinfo endpoint returned non-JSON body: %s", r.text)
        raise UpstreamUserInfoError("userinfo response is not JSON") from e
    if not isinstance(claims, dict):
        logger.error("Userinfo response is not a JSON object: %s", r.text)
        raise UpstreamUserInfoError("userinfo response is not an object")
    return claims
