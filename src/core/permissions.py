"""Role-based access control.

A single capability check decides every role gate in the API. ADMIN is
implicitly part of every restricted role set; beyond that roles are not
hierarchical.
"""

from typing import FrozenSet, Iterable, Optional

from core.exceptions import ForbiddenError, UnauthenticatedError
from schemas.user import Role, TokenIdentity

ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})
TEACHER_ROLES: FrozenSet[Role] = frozenset({Role.TEACHER})
STUDENT_ROLES: FrozenSet[Role] = frozenset({Role.STUDENT})
PARENT_ROLES: FrozenSet[Role] = frozenset({Role.PARENT})


def is_allowed(role: Role, allowed_roles: Iterable[Role]) -> bool:
    """Return True when ``role`` may pass a gate declared for ``allowed_roles``."""
    return role == Role.ADMIN or role in set(allowed_roles)


def check_access(
    identity: Optional[TokenIdentity], allowed_roles: Iterable[Role]
) -> TokenIdentity:
    """Allow or deny an identity against a declared role set.

    Args:
        identity: Authenticated identity, or None for anonymous callers.
        allowed_roles: Roles the operation is declared for.

    Returns:
        The identity, when access is granted.

    Raises:
        UnauthenticatedError: If there is no identity.
        ForbiddenError: If the identity's role is not allowed.
    """
    if identity is None:
        raise UnauthenticatedError("Authentication required")
    if not is_allowed(identity.role, allowed_roles):
        raise ForbiddenError("Insufficient permissions")
    return identity


def ensure_owner_or_admin(identity: TokenIdentity, owner_id: str, message: str) -> None:
    """Raise ForbiddenError unless ``identity`` owns the resource or is ADMIN."""
    if identity.role != Role.ADMIN and identity.user_id != owner_id:
        raise ForbiddenError(message)
