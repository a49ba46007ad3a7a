"""
Role mapping: provider claims + admin policy -> local role list. Pure; no I/O.

Every user gets "user". Project roles from the provider are added; the configured
ADMIN_EMAIL additionally gets "admin".

A list-valued roles claim contributes its index positions ("0", "1", ...) rather than
its values unless sequence_roles_as_values is set. That matches what deployed accounts
already carry; role-gated code may rely on it, so switching is an explicit config change
(ROLES_SEQUENCE_AS_VALUES=true), not a silent fix.
"""
from cms_server.claims import MappingRoles, ProviderClaims, SequenceRoles
from cms_server.config import ADMIN_EMAIL, ROLES_SEQUENCE_AS_VALUES

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def map_roles(
    claims: ProviderClaims,
    admin_email: str | None = ADMIN_EMAIL,
    *,
    sequence_roles_as_values: bool = ROLES_SEQUENCE_AS_VALUES,
) -> list[str]:
    roles = [ROLE_USER]

    def add(name: str) -> None:
        if name not in roles:
            roles.append(name)

    claim = claims.roles
    if isinstance(claim, MappingRoles):
        for name in claim.names:
            add(name)
    elif isinstance(claim, SequenceRoles) and claim.values:
        if sequence_roles_as_values:
            for value in claim.values:
                add(value)
        else:
            for index in range(len(claim.values)):
                add(str(index))

    if claims.email and admin_email and claims.email == admin_email:
        add(ROLE_ADMIN)
    else:
        add(ROLE_USER)
    return roles
