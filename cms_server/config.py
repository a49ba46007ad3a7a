"""
CMS server configuration. Identity provider (ZITADEL) endpoints, client credentials,
session and database settings. Read from the environment once at import time.
"""
import os

# "development" disables the Secure flag on cookies (plain-http localhost)
APP_ENV = os.environ.get("APP_ENV", "development")
COOKIE_SECURE = APP_ENV != "development"

# Provider name used in /api/auth/{provider}
PROVIDER_NAME = "zitadel"

# Identity provider endpoints
AUTHORIZATION_URL = os.environ.get("ZITADEL_AUTHORIZATION_URL", "http://localhost:8080/oauth/v2/authorize")
TOKEN_URL = os.environ.get("ZITADEL_TOKEN_URL", "http://localhost:8080/oauth/v2/token")
USERINFO_URL = os.environ.get("ZITADEL_USERINFO_URL", "http://localhost:8080/oidc/v1/userinfo")

# Confidential client registered at the provider. Empty values are passed through; the provider rejects them.
CLIENT_ID = os.environ.get("ZITADEL_CLIENT_ID", "")
CLIENT_SECRET = os.environ.get("ZITADEL_CLIENT_SECRET", "")
REDIRECT_URI = os.environ.get("ZITADEL_REDIRECT_URI", "http://localhost:3001/api/auth/zitadel/callback")

# Frontend page the browser lands on after a successful login
POST_LOGIN_REDIRECT_URL = os.environ.get("ZITADEL_POST_LOGIN_REDIRECT_URL", "http://localhost:5173/protected")

# Project roles claim; must also be requested as a scope
ROLES_CLAIM = os.environ.get("ZITADEL_ROLES_CLAIM", "urn:zitadel:iam:org:project:roles")
DEFAULT_SCOPE = os.environ.get("ZITADEL_SCOPE", f"openid email profile {ROLES_CLAIM}")

# When true, a list-valued roles claim contributes its values instead of its index positions
ROLES_SEQUENCE_AS_VALUES = os.environ.get("ROLES_SEQUENCE_AS_VALUES", "false").strip().lower() in ("1", "true", "yes")

# Login with this email gets the admin role
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "").strip()

# Timeout (seconds) for each call to the token and userinfo endpoints
OIDC_HTTP_TIMEOUT = float(os.environ.get("OIDC_HTTP_TIMEOUT", "10"))

# PKCE verifier cookie lifetime (seconds)
PKCE_COOKIE_NAME = "pkce_code_verifier"
PKCE_COOKIE_MAX_AGE = 600

# Session cookie; HS256-signed JWT. Empty secret -> random per-process secret (see session.py)
SESSION_COOKIE_NAME = "payload-token"
SESSION_SECRET = os.environ.get("SESSION_SECRET", "")
SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TTL_SECONDS", "7200"))

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./cms.db")

# Optional bootstrap admin with a local password (no default credentials)
SEED_ADMIN_EMAIL = os.environ.get("CMS_SEED_ADMIN_EMAIL", "").strip() or None
SEED_ADMIN_PASSWORD = os.environ.get("CMS_SEED_ADMIN_PASSWORD") or None

LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").lower()
