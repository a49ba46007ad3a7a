"""
Login failure taxonomy. Each error carries the HTTP status and the generic message shown to the
browser; details (upstream bodies, store errors) go to the server log only.
"""


class AuthFlowError(Exception):
    status_code = 500
    public_message = "Authentication failed"


class BadRequest(AuthFlowError):
    """Authorization code or PKCE verifier missing at callback entry."""
    status_code = 400
    public_message = "Missing code or verifier"


class UpstreamTokenError(AuthFlowError):
    """Token endpoint returned a non-success response (or none at all)."""
    public_message = "Failed to get token"


class UpstreamUserInfoError(AuthFlowError):
    """Userinfo endpoint returned a non-success response (or none at all)."""
    public_message = "Failed to get user info"


class AccountReconciliationError(AuthFlowError):
    """Local user could not be found, created or updated."""
    public_message = "Authentication failed"


class StoreError(Exception):
    """User store operation failed."""


class DuplicateSubjectError(StoreError):
    """A user with this sub already exists (unique constraint on users.sub)."""


class DuplicateEmailError(StoreError):
    """Another user already owns this email (unique constraint on users.email)."""
