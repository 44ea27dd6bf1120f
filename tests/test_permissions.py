import pytest

from core.exceptions import ForbiddenError, UnauthenticatedError
from core.permissions import (
    ADMIN_ONLY,
    TEACHER_ROLES,
    check_access,
    ensure_owner_or_admin,
    is_allowed,
)
from schemas.user import Role, TokenIdentity


def identity(role: Role, user_id: str = "u1") -> TokenIdentity:
    return TokenIdentity(user_id=user_id, email=f"{user_id}@school.edu", role=role)


@pytest.mark.parametrize("role", list(Role))
def test_admin_passes_every_gate(role):
    assert is_allowed(Role.ADMIN, {role})


def test_roles_are_not_hierarchical():
    assert not is_allowed(Role.TEACHER, ADMIN_ONLY)
    assert not is_allowed(Role.STUDENT, TEACHER_ROLES)
    assert not is_allowed(Role.PARENT, {Role.STUDENT})


def test_check_access_without_identity():
    with pytest.raises(UnauthenticatedError):
        check_access(None, TEACHER_ROLES)


def test_check_access_denies_wrong_role():
    with pytest.raises(ForbiddenError) as exc_info:
        check_access(identity(Role.STUDENT), TEACHER_ROLES)
    assert exc_info.value.message == "Insufficient permissions"


def test_check_access_returns_identity():
    caller = identity(Role.TEACHER)
    assert check_access(caller, TEACHER_ROLES) is caller


def test_ensure_owner_or_admin():
    ensure_owner_or_admin(identity(Role.TEACHER, "owner"), "owner", "nope")
    ensure_owner_or_admin(identity(Role.ADMIN, "someone"), "owner", "nope")
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_owner_or_admin(identity(Role.TEACHER, "other"), "owner", "nope")
    assert exc_info.value.message == "nope"
