"""Shared fixtures.

Configuration is read from the environment at import time, so the test
settings are exported before any project module is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["RATE_LIMIT_DEFAULT"] = "20 per minute"
os.environ["RATE_LIMIT_AUTH"] = "10 per minute"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["SMTP_HOST"] = ""

import datetime as dt  # noqa: E402
from typing import List, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import app  # noqa: E402
from core.database import SessionLocal, engine  # noqa: E402
from core.dependencies import get_mailer  # noqa: E402
from core.rate_limit import limiter  # noqa: E402
from models.base import Base  # noqa: E402
from schemas.exam import ExamType  # noqa: E402
from schemas.user import Role  # noqa: E402
from utils.auth_manager import AuthManager, identity_of  # noqa: E402
from utils.class_manager import ClassManager  # noqa: E402
from utils.exam_manager import ExamManager  # noqa: E402
from utils.subject_manager import SubjectManager  # noqa: E402
from utils.token_manager import TokenManager  # noqa: E402
from utils.user_manager import UserManager  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class FakeMailer:
    """Collects outgoing mail instead of sending it."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.sent.append((to, subject, html_body))


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def token_manager():
    return TokenManager(access_secret="test-access-secret", refresh_secret="test-refresh-secret")


@pytest.fixture
def user_manager(db):
    return UserManager(db)


@pytest.fixture
def auth_manager(user_manager, token_manager, mailer):
    return AuthManager(user_manager, token_manager, mailer)


@pytest.fixture
def make_user(user_manager):
    counter = {"n": 0}

    def _make(role: Role = Role.STUDENT, email: str = None, **kwargs):
        counter["n"] += 1
        return user_manager.create_user(
            email=email or f"{role.value.lower()}{counter['n']}@school.edu",
            password=kwargs.pop("password", DEFAULT_PASSWORD),
            first_name=kwargs.pop("first_name", role.value.title()),
            last_name=kwargs.pop("last_name", f"No{counter['n']}"),
            role=role,
            **kwargs,
        )

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN)


@pytest.fixture
def teacher(make_user):
    return make_user(Role.TEACHER)


@pytest.fixture
def student(make_user):
    return make_user(Role.STUDENT)


@pytest.fixture
def make_class(db, teacher):
    counter = {"n": 0}

    def _make(capacity: int = 30, name: str = None, section: str = "A", year: int = 2024):
        counter["n"] += 1
        return ClassManager(db).create_class(
            name=name or f"Grade {counter['n']}",
            section=section,
            year=year,
            class_teacher_id=teacher.user_id,
            capacity=capacity,
        )

    return _make


@pytest.fixture
def school_class(make_class):
    return make_class()


@pytest.fixture
def subject(db, school_class, teacher):
    return SubjectManager(db).create_subject(
        name="Mathematics",
        code="math101",
        class_id=school_class.class_id,
        teacher_id=teacher.user_id,
    )


@pytest.fixture
def exam(db, school_class, subject, teacher):
    return ExamManager(db).create_exam(
        name="Midterm",
        class_id=school_class.class_id,
        subject_id=subject.subject_id,
        date=dt.datetime(2024, 3, 15, 9, 0, tzinfo=dt.timezone.utc),
        max_marks=100,
        duration=90,
        exam_type=ExamType.MIDTERM,
        created_by_id=teacher.user_id,
    )


@pytest.fixture
def client(mailer):
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_header(token_manager):
    """Build an Authorization header for a stored user."""

    def _header(model) -> dict:
        tokens = token_manager.issue_token_pair(identity_of(model))
        return {"Authorization": f"Bearer {tokens.access_token}"}

    return _header
