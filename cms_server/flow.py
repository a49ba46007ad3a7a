"""
OIDC callback orchestration.

START -> VALIDATED -> TOKEN_EXCHANGED -> CLAIMS_FETCHED -> USER_RECONCILED -> REDIRECTING
Any step may fail; the flow then sits in FAILED and the error propagates to the route.
Nothing is persisted before USER_RECONCILED, so a failed or abandoned flow leaves no partial state.
"""
import enum
import logging
from typing import Callable

from fastapi import Response

from cms_server import oidc_client
from cms_server.claims import ProviderClaims
from cms_server.config import ADMIN_EMAIL, ROLES_CLAIM
from cms_server.errors import BadRequest
from cms_server.reconcile import reconcile_user
from cms_server.roles import map_roles
from cms_server.session import issue_session
from cms_server.user_store import UserRecord, UserStore

logger = logging.getLogger(__name__)


class LoginState(enum.Enum):
    START = "start"
    VALIDATED = "validated"
    TOKEN_EXCHANGED = "token_exchanged"
    CLAIMS_FETCHED = "claims_fetched"
    USER_RECONCILED = "user_reconciled"
    REDIRECTING = "redirecting"
    FAILED = "failed"


class CallbackFlow:
    """
    One callback invocation. Not reusable: the authorization code is single-use.
    get_store is called only once claims are in hand, so early failures never touch the user store.
    """

    def __init__(
        self,
        get_store: Callable[[], UserStore],
        *,
        admin_email: str | None = ADMIN_EMAIL,
        roles_claim: str = ROLES_CLAIM,
    ):
        self._get_store = get_store
        self.admin_email = admin_email
        self.roles_claim = roles_claim
        self.state = LoginState.START
        self.user: UserRecord | None = None

    def _advance(self, new_state: LoginState) -> None:
        logger.debug("callback %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _fail(self) -> None:
        logger.debug("callback %s -> %s", self.state.value, LoginState.FAILED.value)
        self.state = LoginState.FAILED

    def run(self, code: str | None, code_verifier: str | None) -> UserRecord:
        """Drive the flow to USER_RECONCILED and return the user to log in; on error, mark FAILED and re-raise."""
        if self.state is not LoginState.START:
            raise RuntimeError(f"CallbackFlow already ran (state={self.state.value})")
        try:
            if not code or not code_verifier:
                raise BadRequest("code and code_verifier are required")
            self._advance(LoginState.VALIDATED)

            access_token = oidc_client.exchange_code(code, code_verifier)
            self._advance(LoginState.TOKEN_EXCHANGED)

            raw_claims = oidc_client.fetch_userinfo(access_token)
            claims = ProviderClaims.from_userinfo(raw_claims, self.roles_claim)
            self._advance(LoginState.CLAIMS_FETCHED)

            roles = map_roles(claims, self.admin_email)
            self.user = reconcile_user(claims, roles, self._get_store())
            self._advance(LoginState.USER_RECONCILED)
        except Exception:
            self._fail()
            raise
        return self.user

    def complete(self, response: Response) -> None:
        """Issue the CMS session for the reconciled user on the redirect response."""
        if self.state is not LoginState.USER_RECONCILED:
            raise RuntimeError(f"cannot complete login from state={self.state.value}")
        try:
            issue_session(response, self.user)
        except Exception:
            self._fail()
            raise
        self._advance(LoginState.REDIRECTING)
