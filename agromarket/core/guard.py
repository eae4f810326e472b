"""
Authorization rules applied by every gated operation.

Each rule either returns the caller's identity or raises. Nothing here holds
state, so rules are re-evaluated on every call.
"""
from typing import Optional
from agromarket.core.errors import NotAuthenticated, NotAuthorized
from agromarket.models.user import Role
from agromarket.schemas.user import Identity


def require_authentication(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise NotAuthenticated()
    return identity


def has_role(identity: Identity, role: Role) -> bool:
    if role is Role.FARMER:
        return identity.role is Role.FARMER
    if role is Role.BUYER:
        return identity.role is Role.BUYER
    raise ValueError(f"Unknown role: {role!r}")


def require_role(identity: Optional[Identity], role: Role) -> Identity:
    identity = require_authentication(identity)
    if not has_role(identity, role):
        raise NotAuthorized(f"Only {role.value} accounts can perform this action")
    return identity


def require_ownership(identity: Optional[Identity], owner_id: int) -> Identity:
    identity = require_authentication(identity)
    if identity.id != owner_id:
        raise NotAuthorized("You do not own this resource")
    return identity
