"""
Bootstrap admin account from environment. No hardcoded credentials.
Set CMS_SEED_ADMIN_EMAIL + CMS_SEED_ADMIN_PASSWORD to create a local-password admin (e.g. before the IdP is wired up).
"""
import logging

import bcrypt

from cms_server.config import SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD
from cms_server.roles import ROLE_ADMIN, ROLE_USER
from cms_server.user_store import UserRecord, UserStore

logger = logging.getLogger(__name__)


def _bcrypt_input(password: str) -> bytes:
    # Bcrypt has a 72-byte limit
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_bcrypt_input(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def seed_admin(store: UserStore, email: str, password: str) -> UserRecord | None:
    """Create a local admin if no user has this email. Returns the new user, or None if one existed."""
    if store.find({"email": email}, limit=1).docs:
        logger.debug("Admin user already exists: %s", email)
        return None
    user = store.create(
        {
            "email": email,
            "name": email.split("@", 1)[0],
            "roles": [ROLE_USER, ROLE_ADMIN],
            "password_hash": hash_password(password),
        }
    )
    logger.info("Seeded admin user: %s (id=%s)", email, user.id)
    return user


def seed_from_env(store: UserStore) -> None:
    if SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD:
        seed_admin(store, SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD)
    elif SEED_ADMIN_EMAIL or SEED_ADMIN_PASSWORD:
        logger.warning("CMS_SEED_ADMIN_EMAIL and CMS_SEED_ADMIN_PASSWORD must both be set; skipping admin seed")
