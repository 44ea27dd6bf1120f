from datetime import timedelta

import pytest

from core.exceptions import TokenInvalidError
from schemas.user import Role, TokenIdentity
from utils.token_manager import TokenManager


@pytest.fixture
def identity():
    return TokenIdentity(user_id="u1", email="a@school.edu", role=Role.TEACHER)


def test_access_token_round_trip(token_manager, identity):
    tokens = token_manager.issue_token_pair(identity)
    assert tokens.token_type == "bearer"
    assert token_manager.verify_access(tokens.access_token) == identity
    assert token_manager.verify_refresh(tokens.refresh_token) == identity


def test_token_classes_do_not_cross_verify(token_manager, identity):
    tokens = token_manager.issue_token_pair(identity)
    with pytest.raises(TokenInvalidError):
        token_manager.verify_refresh(tokens.access_token)
    with pytest.raises(TokenInvalidError):
        token_manager.verify_access(tokens.refresh_token)


def test_shared_secret_still_separates_token_types(identity):
    manager = TokenManager(access_secret="same", refresh_secret="same")
    tokens = manager.issue_token_pair(identity)
    with pytest.raises(TokenInvalidError):
        manager.verify_access(tokens.refresh_token)


def test_two_pairs_for_same_identity_differ(token_manager, identity):
    first = token_manager.issue_token_pair(identity)
    second = token_manager.issue_token_pair(identity)
    assert first.access_token != second.access_token
    assert first.refresh_token != second.refresh_token


def test_expired_token_is_rejected(identity):
    manager = TokenManager(
        access_secret="a", refresh_secret="r", access_ttl=timedelta(seconds=-1)
    )
    tokens = manager.issue_token_pair(identity)
    with pytest.raises(TokenInvalidError):
        manager.verify_access(tokens.access_token)


def test_wrong_secret_and_garbage_are_rejected(token_manager, identity):
    other = TokenManager(access_secret="other", refresh_secret="other-r")
    tokens = other.issue_token_pair(identity)
    with pytest.raises(TokenInvalidError):
        token_manager.verify_access(tokens.access_token)
    with pytest.raises(TokenInvalidError):
        token_manager.verify_access("not-a-jwt")
