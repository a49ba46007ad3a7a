"""
Provider claims parsed at the boundary. The userinfo JSON is untrusted and loosely shaped;
everything downstream works on ProviderClaims and the RolesClaim variant, never on the raw dict.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MappingRoles:
    """Roles claim was an object: {"role-name": <anything>, ...}. Only the keys matter."""
    names: tuple[str, ...]


@dataclass(frozen=True)
class SequenceRoles:
    """Roles claim was a list of role-name strings."""
    values: tuple[str, ...]


@dataclass(frozen=True)
class AbsentRoles:
    """Roles claim missing, null, empty-ish, or of an unusable type."""


RolesClaim = MappingRoles | SequenceRoles | AbsentRoles


def parse_roles_claim(raw: Any) -> RolesClaim:
    if isinstance(raw, Mapping):
        return MappingRoles(names=tuple(str(k) for k in raw.keys()))
    if isinstance(raw, (list, tuple)):
        return SequenceRoles(values=tuple(str(v) for v in raw))
    return AbsentRoles()


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class ProviderClaims:
    sub: str | None
    email: str | None = None
    name: str | None = None
    preferred_username: str | None = None
    roles: RolesClaim = field(default_factory=AbsentRoles)

    @classmethod
    def from_userinfo(cls, data: Mapping[str, Any], roles_claim: str) -> "ProviderClaims":
        """Pick the fields the login flow uses; unknown claims are ignored."""
        return cls(
            sub=_opt_str(data.get("sub")) or None,
            email=_opt_str(data.get("email")),
            name=_opt_str(data.get("name")),
            preferred_username=_opt_str(data.get("preferred_username")),
            roles=parse_roles_claim(data.get(roles_claim)),
        )

    @property
    def display_name(self) -> str | None:
        """name, falling back to preferred_username."""
        return self.name or self.preferred_username
