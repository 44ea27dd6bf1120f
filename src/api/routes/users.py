"""User administration routes."""

from typing import Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity
from config import API_PREFIX
from core.dependencies import UserManagerDep
from schemas.common import MessageResponse, Page
from schemas.user import CreateUserRequest, Role, UpdateUserRequest, User, UserStatus

router = APIRouter(prefix=f"{API_PREFIX}/users", tags=["Users"])


@router.get("", response_model=Page[User], summary="List users")
def list_users(
    identity: AdminIdentity,
    user_manager: UserManagerDep,
    params: PageParams,
    role: Optional[Role] = None,
    status: Optional[UserStatus] = None,
    search: Optional[str] = None,
) -> Page[User]:
    return user_manager.list_users(params, role=role, status=status, search=search)


@router.get("/{user_id}", response_model=User, summary="Get a user")
def get_user(user_id: str, identity: CurrentIdentity, user_manager: UserManagerDep) -> User:
    return user_manager.get_user(user_id)


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
def create_user(
    req: CreateUserRequest, identity: AdminIdentity, user_manager: UserManagerDep
) -> User:
    """Create an account of any role, ADMIN included."""
    model = user_manager.create_user(
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
        status=req.status,
    )
    return User.model_validate(model)


@router.patch("/{user_id}", response_model=User, summary="Update a user")
def update_user(
    user_id: str,
    req: UpdateUserRequest,
    identity: AdminIdentity,
    user_manager: UserManagerDep,
) -> User:
    model = user_manager.update_user(
        user_id,
        email=req.email,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
        status=req.status,
        parent_of=req.parent_of,
        student_of=req.student_of,
    )
    return User.model_validate(model)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete a user")
def delete_user(
    user_id: str, identity: AdminIdentity, user_manager: UserManagerDep
) -> MessageResponse:
    user_manager.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
