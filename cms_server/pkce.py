"""
PKCE (RFC 7636) helpers for login initiation. S256 only.
The verifier never leaves the server except as an HTTP-only cookie; the challenge goes in the authorize URL.
"""
import hashlib
import secrets
from base64 import urlsafe_b64encode
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def _b64url(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_verifier() -> str:
    """32 random bytes -> 43 chars base64url (256 bits entropy)."""
    return _b64url(secrets.token_bytes(32))


def derive_challenge(verifier: str) -> str:
    """base64url(SHA256(verifier)) without padding; always 43 chars."""
    return _b64url(hashlib.sha256(verifier.encode("ascii")).digest())


def generate_pkce() -> tuple[str, str]:
    """Returns (code_verifier, code_challenge)."""
    verifier = generate_verifier()
    return verifier, derive_challenge(verifier)


def build_authorize_url(
    *,
    authorization_url: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    code_challenge: str,
) -> str:
    """Build the provider authorize URL. Query params already on authorization_url are kept."""
    parts = urlsplit(authorization_url)
    params = parse_qsl(parts.query, keep_blank_values=True)
    params += [
        ("client_id", client_id),
        ("response_type", "code"),
        ("redirect_uri", redirect_uri),
        ("scope", scope),
        ("code_challenge", code_challenge),
        ("code_challenge_method", "S256"),
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))
