"""
Find-or-create the local user for a provider identity (keyed by sub).
First login creates the user; later logins rewrite name and roles only. email and sub never change here.
"""
import logging

from cms_server.claims import ProviderClaims
from cms_server.errors import AccountReconciliationError, DuplicateEmailError, DuplicateSubjectError, StoreError
from cms_server.user_store import UserRecord, UserStore

logger = logging.getLogger(__name__)


def _update_existing(existing: UserRecord, claims: ProviderClaims, roles: list[str], store: UserStore) -> UserRecord:
    store.update(existing.id, {"name": claims.display_name, "roles": roles})
    # update() may return a partial record; re-read for the authoritative one
    user = store.find_by_id(existing.id)
    if user is None:
        raise AccountReconciliationError(f"user id={existing.id} vanished after update")
    logger.info("Updated user id=%s from provider sub=%s roles=%s", user.id, claims.sub, roles)
    return user


def reconcile_user(claims: ProviderClaims, roles: list[str], store: UserStore) -> UserRecord:
    """Return the local user for claims.sub, creating or updating it. Store failures -> AccountReconciliationError."""
    if not claims.sub:
        raise AccountReconciliationError("userinfo has no sub claim")

    try:
        found = store.find({"sub": claims.sub}, limit=1)
        if found.docs:
            return _update_existing(found.docs[0], claims, roles, store)

        try:
            user = store.create(
                {
                    "email": claims.email,
                    "sub": claims.sub,
                    "name": claims.display_name,
                    "roles": roles,
                }
            )
        except DuplicateSubjectError:
            # Concurrent first login for the same sub won the insert; treat as existing user
            logger.info("User with sub=%s created concurrently; updating instead", claims.sub)
            found = store.find({"sub": claims.sub}, limit=1)
            if not found.docs:
                raise AccountReconciliationError(f"sub={claims.sub} conflicts but cannot be found")
            return _update_existing(found.docs[0], claims, roles, store)
        except DuplicateEmailError as e:
            # Email belongs to another account (e.g. a local password user); never link by email
            logger.warning("Provider sub=%s has email %s already owned by another user", claims.sub, claims.email)
            raise AccountReconciliationError(str(e)) from e

        logger.info("Created user id=%s for provider sub=%s roles=%s", user.id, claims.sub, roles)
        return user
    except StoreError as e:
        logger.error("User store failure for sub=%s: %s", claims.sub, e)
        raise AccountReconciliationError(str(e)) from e
