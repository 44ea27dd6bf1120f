"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Managers are built per request around a request-scoped DB session; the token
service and the mailer hold no per-request state and are shared.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import announcement_manager
from utils import attendance_manager
from utils import auth_manager
from utils import class_manager
from utils import enrollment_manager
from utils import exam_manager
from utils import mail_manager
from utils import subject_manager
from utils import token_manager
from utils import user_manager

# Process-wide singletons
_token_manager_instance: token_manager.TokenManager = None
_mailer_instance: mail_manager.Mailer = None


def get_token_manager() -> token_manager.TokenManager:
    """Get TokenManager singleton instance.

    Returns:
        TokenManager instance (singleton).
    """
    global _token_manager_instance
    if _token_manager_instance is None:
        _token_manager_instance = token_manager.TokenManager()
    return _token_manager_instance


def get_mailer() -> mail_manager.Mailer:
    """Get Mailer singleton instance.

    Returns:
        Mailer instance (singleton).
    """
    global _mailer_instance
    if _mailer_instance is None:
        _mailer_instance = mail_manager.Mailer()
    return _mailer_instance


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_auth_manager(
    users: user_manager.UserManager = Depends(get_user_manager),
    tokens: token_manager.TokenManager = Depends(get_token_manager),
    mailer: mail_manager.Mailer = Depends(get_mailer),
) -> auth_manager.AuthManager:
    """Get AuthManager instance wired to the request's UserManager.

    Args:
        users: Request-scoped UserManager.
        tokens: Shared TokenManager.
        mailer: Shared Mailer.

    Returns:
        AuthManager instance.
    """
    return auth_manager.AuthManager(users, tokens, mailer)


def get_class_manager(db: Session = Depends(get_db)) -> class_manager.ClassManager:
    """Get ClassManager instance with request-scoped DB session."""
    return class_manager.ClassManager(db)


def get_subject_manager(db: Session = Depends(get_db)) -> subject_manager.SubjectManager:
    """Get SubjectManager instance with request-scoped DB session."""
    return subject_manager.SubjectManager(db)


def get_enrollment_manager(
    db: Session = Depends(get_db),
) -> enrollment_manager.EnrollmentManager:
    """Get EnrollmentManager instance with request-scoped DB session."""
    return enrollment_manager.EnrollmentManager(db)


def get_attendance_manager(
    db: Session = Depends(get_db),
) -> attendance_manager.AttendanceManager:
    """Get AttendanceManager instance with request-scoped DB session."""
    return attendance_manager.AttendanceManager(db)


def get_exam_manager(db: Session = Depends(get_db)) -> exam_manager.ExamManager:
    """Get ExamManager instance with request-scoped DB session."""
    return exam_manager.ExamManager(db)


def get_announcement_manager(
    db: Session = Depends(get_db),
) -> announcement_manager.AnnouncementManager:
    """Get AnnouncementManager instance with request-scoped DB session."""
    return announcement_manager.AnnouncementManager(db)


# Type aliases for dependency injection
TokenManagerDep = Annotated[
    token_manager.TokenManager, Depends(get_token_manager)
]
MailerDep = Annotated[
    mail_manager.Mailer, Depends(get_mailer)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
AuthManagerDep = Annotated[
    auth_manager.AuthManager, Depends(get_auth_manager)
]
ClassManagerDep = Annotated[
    class_manager.ClassManager, Depends(get_class_manager)
]
SubjectManagerDep = Annotated[
    subject_manager.SubjectManager, Depends(get_subject_manager)
]
EnrollmentManagerDep = Annotated[
    enrollment_manager.EnrollmentManager, Depends(get_enrollment_manager)
]
AttendanceManagerDep = Annotated[
    attendance_manager.AttendanceManager, Depends(get_attendance_manager)
]
ExamManagerDep = Annotated[
    exam_manager.ExamManager, Depends(get_exam_manager)
]
AnnouncementManagerDep = Annotated[
    announcement_manager.AnnouncementManager, Depends(get_announcement_manager)
]
