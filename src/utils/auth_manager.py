"""Authentication workflows.

Registration, login, token refresh and the password lifecycle. Credentials
live in UserManager; tokens are issued by TokenManager and reset links are
delivered through the Mailer.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from config import RESET_TOKEN_EXPIRE_MINUTES
from core.exceptions import (
    AccountNotActiveError,
    IncorrectCurrentPasswordError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidRefreshTokenError,
    TokenInvalidError,
)
from models.user import UserModel
from schemas.user import AuthResponse, Role, TokenIdentity, TokenPair, User, UserStatus
from utils.mail_manager import Mailer, build_password_reset_email
from utils.timeutils import utc_now
from utils.token_manager import TokenManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

PASSWORD_RESET_SUBJECT = "Password Reset Request - School Management System"


def identity_of(model: UserModel) -> TokenIdentity:
    return TokenIdentity(user_id=model.user_id, email=model.email, role=model.role)


class AuthManager:
    """Coordinates the credential store, token service and mailer."""

    def __init__(
        self,
        user_manager: UserManager,
        token_manager: TokenManager,
        mailer: Mailer,
    ):
        self.user_manager = user_manager
        self.token_manager = token_manager
        self.mailer = mailer

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role,
    ) -> AuthResponse:
        """Register a new account of any role and sign it in.

        Raises:
            DuplicateEmailError: If the email is already taken.
        """
        model = self.user_manager.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=Role(role),
        )
        return self._sign_in(model)

    def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate with email and password.

        Unknown emails and wrong passwords fail identically. The account
        status is checked before the password.

        Raises:
            InvalidCredentialsError: For an unknown email or a wrong password.
            AccountNotActiveError: If the account is not ACTIVE.
        """
        model = self.user_manager.get_user_by_email(email)
        if model is None:
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()
        if model.status != UserStatus.ACTIVE.value:
            logger.info("Login refused for inactive user %s", model.user_id)
            raise AccountNotActiveError()
        if not self.user_manager.verify_password(password, model.password_hash):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()
        return self._sign_in(model)

    def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The new pair is built from the current user record, so role and email
        changes since the last sign-in are picked up.

        Raises:
            InvalidRefreshTokenError: If the token does not verify or its user
                is gone or no longer ACTIVE.
        """
        try:
            identity = self.token_manager.verify_refresh(refresh_token)
        except TokenInvalidError as e:
            raise InvalidRefreshTokenError() from e

        model = self.user_manager.db.get(UserModel, identity.user_id)
        if model is None or model.status != UserStatus.ACTIVE.value:
            raise InvalidRefreshTokenError()
        return self.token_manager.issue_token_pair(identity_of(model))

    def logout(self) -> None:
        """Tokens are stateless; the client discards them."""
        return None

    def forgot_password(self, email: str) -> None:
        """Start a password reset.

        Succeeds whether or not the email is registered. For a registered
        email a reset token is stored (as a digest) and mailed out.

        Raises:
            EmailDeliveryFailedError: If the reset email cannot be sent. The
                stored token is kept.
        """
        model = self.user_manager.get_user_by_email(email)
        if model is None:
            logger.info("Password reset requested for unknown email")
            return

        reset_token = secrets.token_hex(32)
        expires_at = utc_now() + timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES)
        self.user_manager.set_reset_token(model.user_id, reset_token, expires_at)
        logger.info("Password reset token issued for user %s", model.user_id)

        self.mailer.send(
            to=model.email,
            subject=PASSWORD_RESET_SUBJECT,
            html_body=build_password_reset_email(reset_token),
        )

    def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password with a reset token.

        Raises:
            InvalidOrExpiredTokenError: If no user holds the token or it has
                expired.
        """
        model = self.user_manager.get_user_by_reset_token(token)
        if model is None:
            raise InvalidOrExpiredTokenError()
        self.user_manager.reset_password(model, new_password)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """Change the password of a signed-in user.

        Raises:
            NotFoundError: If the user no longer exists.
            IncorrectCurrentPasswordError: If current_password is wrong.
        """
        model = self.user_manager.get_user_model(user_id)
        if not self.user_manager.verify_password(current_password, model.password_hash):
            raise IncorrectCurrentPasswordError()
        self.user_manager.update_password(user_id, new_password)

    def get_profile(self, user_id: str) -> User:
        return self.user_manager.get_user(user_id)

    def update_profile(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        model = self.user_manager.update_user(
            user_id, first_name=first_name, last_name=last_name
        )
        return User.model_validate(model)

    def _sign_in(self, model: UserModel) -> AuthResponse:
        tokens = self.token_manager.issue_token_pair(identity_of(model))
        self.user_manager.update_last_login(model.user_id)
        logger.info("User %s signed in", model.user_id)
        return AuthResponse(user=User.model_validate(model), tokens=tokens)
