"""User management utilities.

This module is the credential store: user persistence, password hashing,
password reset tokens and parent/child links.
"""

import hashlib
import logging
from datetime import datetime
from typing import List, Optional

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import BCRYPT_ROUNDS
from core.exceptions import DuplicateEmailError, NotFoundError
from models.base import generate_id
from models.user import UserModel
from schemas.common import Page, PageQuery
from schemas.user import Role, User, UserStatus
from utils.integrity import require_users
from utils.pagination import paginate
from utils.timeutils import parse_iso, to_utc_iso, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = ("created_at", "updated_at", "email", "first_name", "last_name", "role", "status", "last_login")


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively, so they are stored lower-cased."""
    return email.strip().lower()


def hash_reset_token(token: str) -> str:
    """Digest stored in place of the reset token that is mailed out."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        # bcrypt only looks at the first 72 bytes
        password_bytes = password.encode("utf-8")[:72]
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:72]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role,
        status: Optional[UserStatus] = None,
    ) -> UserModel:
        """Create a new user.

        Args:
            email: Email address, unique case-insensitively.
            password: Plain text password.
            first_name: First name.
            last_name: Last name.
            role: User role.
            status: Initial status, ACTIVE when omitted.

        Returns:
            Created UserModel.

        Raises:
            DuplicateEmailError: If the email is already taken.
        """
        email = normalize_email(email)
        if self.get_user_by_email(email) is not None:
            raise DuplicateEmailError()

        now = utc_now_iso()
        model = UserModel(
            user_id=generate_id(),
            email=email,
            password_hash=self.hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=Role(role).value,
            status=(status or UserStatus.ACTIVE).value,
            created_at=now,
            updated_at=now,
        )

        # Two concurrent registrations can both pass the check above; the
        # unique index on email decides.
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError() from e

        logger.info("Created user %s with role %s", model.user_id, model.role)
        return model

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        """Get a user by email, or None."""
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == normalize_email(email))
            .first()
        )

    def get_user_model(self, user_id: str) -> UserModel:
        """Get a user row by id.

        Raises:
            NotFoundError: If no such user exists.
        """
        model = self.db.get(UserModel, user_id)
        if model is None:
            raise NotFoundError("User not found")
        return model

    def get_user(self, user_id: str) -> User:
        return User.model_validate(self.get_user_model(user_id))

    def list_users(
        self,
        params: Optional[PageQuery] = None,
        role: Optional[Role] = None,
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
    ) -> Page[User]:
        """List users with optional filters, one page at a time."""
        query = self.db.query(UserModel)
        if role:
            query = query.filter(UserModel.role == role.value)
        if status:
            query = query.filter(UserModel.status == status.value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    UserModel.first_name.ilike(pattern),
                    UserModel.last_name.ilike(pattern),
                    UserModel.email.ilike(pattern),
                )
            )
        items, pagination = paginate(query, UserModel, params, USER_SORT_FIELDS)
        return Page[User](
            items=[User.model_validate(m) for m in items], pagination=pagination
        )

    def update_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[Role] = None,
        status: Optional[UserStatus] = None,
        parent_of: Optional[List[str]] = None,
        student_of: Optional[List[str]] = None,
    ) -> UserModel:
        """Update a user's fields and links. None leaves a field unchanged.

        Raises:
            NotFoundError: If the user does not exist.
            DuplicateEmailError: If the new email belongs to another user.
            ValidationError: If a linked user id does not resolve.
        """
        model = self.get_user_model(user_id)

        if email is not None and normalize_email(email) != model.email:
            if self.get_user_by_email(email) is not None:
                raise DuplicateEmailError()
            model.email = normalize_email(email)
        if parent_of is not None:
            model.children = require_users(self.db, parent_of)
        if student_of is not None:
            model.parents = require_users(self.db, student_of)

        if first_name is not None:
            model.first_name = first_name.strip()
        if last_name is not None:
            model.last_name = last_name.strip()
        if role is not None:
            model.role = role.value
        if status is not None:
            model.status = status.value
        model.updated_at = utc_now_iso()

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError() from e
        self.db.refresh(model)
        logger.info("Updated user %s", user_id)
        return model

    def delete_user(self, user_id: str) -> None:
        """Delete a user.

        References held by classes, subjects and other records are left in
        place.
        """
        model = self.get_user_model(user_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted user %s", user_id)

    def update_password(self, user_id: str, new_password: str) -> None:
        model = self.get_user_model(user_id)
        model.password_hash = self.hash_password(new_password)
        model.updated_at = utc_now_iso()
        self.db.commit()
        logger.info("Password changed for user %s", user_id)

    def update_last_login(self, user_id: str) -> None:
        model = self.get_user_model(user_id)
        model.last_login = utc_now_iso()
        self.db.commit()

    def set_reset_token(self, user_id: str, token: str, expires_at: datetime) -> None:
        """Store the digest of a password reset token and its expiry."""
        model = self.get_user_model(user_id)
        model.reset_password_token = hash_reset_token(token)
        model.reset_password_expires = to_utc_iso(expires_at)
        self.db.commit()

    def get_user_by_reset_token(self, token: str) -> Optional[UserModel]:
        """Return the user holding ``token`` if it has not expired, else None."""
        model = (
            self.db.query(UserModel)
            .filter(UserModel.reset_password_token == hash_reset_token(token))
            .first()
        )
        if model is None:
            return None
        expires_at = parse_iso(model.reset_password_expires)
        if expires_at is None or expires_at <= utc_now():
            return None
        return model

    def reset_password(self, model: UserModel, new_password: str) -> None:
        """Replace the password and clear the reset token in one commit."""
        model.password_hash = self.hash_password(new_password)
        model.reset_password_token = None
        model.reset_password_expires = None
        model.updated_at = utc_now_iso()
        self.db.commit()
        logger.info("Password reset for user %s", model.user_id)
