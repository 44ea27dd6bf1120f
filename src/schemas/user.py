"""User and authentication schema definitions."""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from schemas.common import ClassRef, UserRef


class Role(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


# Surrounding whitespace is stripped before the length is checked
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class User(BaseModel):
    """Public view of a user. Never carries the password hash or reset fields."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: Role
    status: UserStatus
    class_id: Optional[str] = None
    school_class: Optional[ClassRef] = None
    children: List[UserRef] = Field(default_factory=list)
    parents: List[UserRef] = Field(default_factory=list)
    last_login: Optional[str] = None
    created_at: str
    updated_at: str


class TokenIdentity(BaseModel):
    """Identity carried inside access and refresh tokens."""

    user_id: str
    email: str
    role: Role


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    user: User
    tokens: TokenPair


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: PersonName
    last_name: PersonName
    role: Role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UpdateProfileRequest(BaseModel):
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: PersonName
    last_name: PersonName
    role: Role
    status: Optional[UserStatus] = None


class UpdateUserRequest(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None
    parent_of: Optional[List[str]] = Field(
        default=None, description="Ids of the students this user is a parent of."
    )
    student_of: Optional[List[str]] = Field(
        default=None, description="Ids of this student's parents."
    )
