"""Relational integrity rules shared by the entity managers.

Each rule either returns the loaded row or raises a SchoolAPIError. Managers
call them one after another before mutating anything, so the first failing
rule aborts the whole operation.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    AlreadyEnrolledError,
    BusinessRuleViolation,
    CapacityExceededError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from models.class_model import ClassModel
from models.subject import SubjectModel
from models.user import UserModel
from schemas.announcement import Audience
from schemas.user import Role

logger = logging.getLogger(__name__)


def require_user(
    db: Session, user_id: str, not_found_message: str = "User not found"
) -> UserModel:
    user = db.get(UserModel, user_id)
    if user is None:
        raise NotFoundError(not_found_message)
    return user


def require_user_with_role(
    db: Session,
    user_id: str,
    role: Role,
    not_found_message: str,
    wrong_role_message: str,
) -> UserModel:
    """Load a user and insist on its role.

    Raises:
        NotFoundError: If the user does not exist.
        BusinessRuleViolation: If the user has another role.
    """
    user = require_user(db, user_id, not_found_message)
    if user.role != role.value:
        raise BusinessRuleViolation(wrong_role_message)
    return user


def require_teacher(db: Session, user_id: str, label: str = "Teacher") -> UserModel:
    return require_user_with_role(
        db,
        user_id,
        Role.TEACHER,
        f"{label} not found",
        f"{label} must have TEACHER role",
    )


def require_student(db: Session, user_id: str) -> UserModel:
    return require_user_with_role(
        db,
        user_id,
        Role.STUDENT,
        "Student not found",
        "User must have STUDENT role",
    )


def require_class(db: Session, class_id: str) -> ClassModel:
    class_model = db.get(ClassModel, class_id)
    if class_model is None:
        raise NotFoundError("Class not found")
    return class_model


def require_subject_in_class(db: Session, subject_id: str, class_id: str) -> SubjectModel:
    subject = (
        db.query(SubjectModel)
        .filter(SubjectModel.subject_id == subject_id, SubjectModel.class_id == class_id)
        .first()
    )
    if subject is None:
        raise NotFoundError("Subject not found or not assigned to this class")
    return subject


def require_subjects_in_class(
    db: Session, subject_ids: Iterable[str], class_id: str
) -> List[SubjectModel]:
    """Load every subject in ``subject_ids``; all must belong to ``class_id``."""
    wanted = list(dict.fromkeys(subject_ids))
    if not wanted:
        return []
    subjects = (
        db.query(SubjectModel)
        .filter(SubjectModel.subject_id.in_(wanted), SubjectModel.class_id == class_id)
        .all()
    )
    if len(subjects) != len(wanted):
        raise ValidationError("One or more subjects not found or not assigned to this class")
    order = {subject_id: index for index, subject_id in enumerate(wanted)}
    return sorted(subjects, key=lambda s: order[s.subject_id])


def require_users(db: Session, user_ids: Iterable[str]) -> List[UserModel]:
    wanted = list(dict.fromkeys(user_ids))
    users = db.query(UserModel).filter(UserModel.user_id.in_(wanted)).all() if wanted else []
    if len(users) != len(wanted):
        raise ValidationError("One or more users not found")
    return users


def ensure_class_has_room(class_model: ClassModel, student: UserModel) -> None:
    """Membership and capacity checks for adding ``student`` to a class."""
    if any(s.user_id == student.user_id for s in class_model.students):
        raise AlreadyEnrolledError()
    if len(class_model.students) >= class_model.capacity:
        raise CapacityExceededError()


def ensure_marks_within(marks: float, max_marks: int) -> None:
    if marks > max_marks:
        raise BusinessRuleViolation("Marks cannot exceed maximum marks for this exam")


def validate_announcement_targets(
    db: Session, audience: Audience, targets: Optional[List[str]]
) -> Optional[str]:
    """Check announcement targets against the audience.

    Returns:
        The target model name ('Class' or 'User'), or None for ALL.

    Raises:
        ValidationError: If targets are missing for a non-ALL audience or do
            not resolve against the right collection.
    """
    targets = targets or []
    if audience != Audience.ALL and not targets:
        raise ValidationError("Targets are required when audience is not ALL")

    if audience == Audience.CLASS:
        wanted = set(targets)
        found = db.query(ClassModel.class_id).filter(ClassModel.class_id.in_(wanted)).count()
        if found != len(wanted):
            raise ValidationError("One or more classes not found")
        return "Class"
    if audience in (Audience.USER, Audience.ROLE):
        wanted = set(targets)
        found = db.query(UserModel.user_id).filter(UserModel.user_id.in_(wanted)).count()
        if found != len(wanted):
            raise ValidationError("One or more users not found")
        return "User"
    return None


def commit_unique(db: Session, conflict_message: str) -> None:
    """Commit the session, translating a unique constraint failure.

    The pre-checks in the managers only give early, readable errors; the
    database unique constraints decide concurrent writes. A violation is
    rolled back and surfaced as the same ConflictError.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Unique constraint rejected write: %s", conflict_message)
        raise ConflictError(conflict_message) from e
