from datetime import timedelta

import pytest

from core.exceptions import (
    AccountNotActiveError,
    DuplicateEmailError,
    EmailDeliveryFailedError,
    IncorrectCurrentPasswordError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidRefreshTokenError,
)
from schemas.user import Role, UserStatus
from utils.auth_manager import AuthManager
from utils.timeutils import utc_now

from conftest import DEFAULT_PASSWORD


def register(auth_manager, email="new@school.edu", role=Role.STUDENT):
    return auth_manager.register(
        email=email,
        password="password1",
        first_name="New",
        last_name="User",
        role=role,
    )


def test_register_issues_tokens_for_new_user(auth_manager, token_manager):
    response = register(auth_manager, email="New@School.Edu")
    assert response.user.email == "new@school.edu"
    assert response.user.role == Role.STUDENT
    assert response.user.last_login is not None

    access = token_manager.verify_access(response.tokens.access_token)
    refresh = token_manager.verify_refresh(response.tokens.refresh_token)
    assert access == refresh
    assert access.user_id == response.user.user_id


def test_register_duplicate_email(auth_manager):
    register(auth_manager)
    with pytest.raises(DuplicateEmailError):
        register(auth_manager, email="NEW@school.edu")


def test_any_role_can_register(auth_manager):
    for role in Role:
        response = register(auth_manager, email=f"{role.value.lower()}@school.edu", role=role)
        assert response.user.role == role
        assert response.user.status == UserStatus.ACTIVE


def test_login_failures_are_indistinguishable(auth_manager, student):
    with pytest.raises(InvalidCredentialsError) as unknown:
        auth_manager.login("nobody@school.edu", DEFAULT_PASSWORD)
    with pytest.raises(InvalidCredentialsError) as wrong:
        auth_manager.login(student.email, "wrong-password")
    assert unknown.value.message == wrong.value.message
    assert unknown.value.status_code == wrong.value.status_code == 401


def test_login_inactive_account(auth_manager, make_user):
    user = make_user(Role.TEACHER, status=UserStatus.SUSPENDED)
    with pytest.raises(AccountNotActiveError):
        auth_manager.login(user.email, DEFAULT_PASSWORD)
    # Status is checked before the password
    with pytest.raises(AccountNotActiveError):
        auth_manager.login(user.email, "wrong-password")


def test_login_updates_last_login(auth_manager, student):
    response = auth_manager.login(student.email.upper(), DEFAULT_PASSWORD)
    assert response.user.user_id == student.user_id
    assert response.user.last_login is not None


def test_refresh_uses_current_user_record(auth_manager, user_manager, token_manager, student):
    tokens = auth_manager.login(student.email, DEFAULT_PASSWORD).tokens
    user_manager.update_user(student.user_id, role=Role.TEACHER)

    new_tokens = auth_manager.refresh(tokens.refresh_token)
    assert token_manager.verify_access(new_tokens.access_token).role == Role.TEACHER


def test_refresh_rejects_access_token(auth_manager, student):
    tokens = auth_manager.login(student.email, DEFAULT_PASSWORD).tokens
    with pytest.raises(InvalidRefreshTokenError):
        auth_manager.refresh(tokens.access_token)


def test_refresh_rejects_deleted_user(auth_manager, user_manager, student):
    tokens = auth_manager.login(student.email, DEFAULT_PASSWORD).tokens
    user_manager.delete_user(student.user_id)
    with pytest.raises(InvalidRefreshTokenError):
        auth_manager.refresh(tokens.refresh_token)


def test_forgot_password_unknown_email_sends_nothing(auth_manager, mailer):
    auth_manager.forgot_password("nobody@school.edu")
    assert mailer.sent == []


def test_password_reset_flow(auth_manager, user_manager, mailer, student):
    auth_manager.forgot_password(student.email)
    assert len(mailer.sent) == 1
    to, _, body = mailer.sent[0]
    assert to == student.email

    token = body.split("token=")[1].split('"')[0]
    model = user_manager.get_user_model(student.user_id)
    assert model.reset_password_token != token

    auth_manager.reset_password(token, "brand-new-password")
    auth_manager.login(student.email, "brand-new-password")

    model = user_manager.get_user_model(student.user_id)
    assert model.reset_password_token is None
    assert model.reset_password_expires is None
    with pytest.raises(InvalidOrExpiredTokenError):
        auth_manager.reset_password(token, "another-password")


def test_expired_reset_token(auth_manager, user_manager, student):
    user_manager.set_reset_token(student.user_id, "abc123", utc_now() - timedelta(minutes=1))
    with pytest.raises(InvalidOrExpiredTokenError):
        auth_manager.reset_password("abc123", "brand-new-password")


def test_change_password(auth_manager, student):
    with pytest.raises(IncorrectCurrentPasswordError):
        auth_manager.change_password(student.user_id, "wrong-password", "newpass1")
    auth_manager.change_password(student.user_id, DEFAULT_PASSWORD, "newpass1")
    auth_manager.login(student.email, "newpass1")


def test_update_profile(auth_manager, student):
    user = auth_manager.update_profile(student.user_id, first_name="Ada")
    assert user.first_name == "Ada"
    assert user.full_name == f"Ada {student.last_name}"


class FailingMailer:
    def send(self, to: str, subject: str, html_body: str) -> None:
        self.body = html_body
        raise EmailDeliveryFailedError()


def test_reset_token_survives_mail_failure(user_manager, token_manager, student):
    mailer = FailingMailer()
    manager = AuthManager(user_manager, token_manager, mailer)

    with pytest.raises(EmailDeliveryFailedError) as exc_info:
        manager.forgot_password(student.email)
    assert exc_info.value.status_code == 500

    model = user_manager.get_user_model(student.user_id)
    assert model.reset_password_token is not None
    assert model.reset_password_expires is not None

    token = mailer.body.split("token=")[1].split('"')[0]
    manager.reset_password(token, "brand-new-password")
    manager.login(student.email, "brand-new-password")
