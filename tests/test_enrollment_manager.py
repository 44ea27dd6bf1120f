import pytest

from core.exceptions import (
    AlreadyEnrolledInSubjectError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from schemas.enrollment import EnrollmentStatus
from utils.enrollment_manager import EnrollmentManager
from utils.subject_manager import SubjectManager


@pytest.fixture
def enrollment_manager(db):
    return EnrollmentManager(db)


def test_enroll_with_subjects(enrollment_manager, school_class, subject, student):
    enrollment = enrollment_manager.create_enrollment(
        student.user_id, school_class.class_id, 2024, subject_ids=[subject.subject_id]
    )
    assert enrollment.status == EnrollmentStatus.ACTIVE.value
    assert [s.subject_id for s in enrollment.subjects] == [subject.subject_id]


def test_duplicate_enrollment(enrollment_manager, school_class, student):
    enrollment_manager.create_enrollment(student.user_id, school_class.class_id, 2024)
    with pytest.raises(ConflictError) as exc_info:
        enrollment_manager.create_enrollment(student.user_id, school_class.class_id, 2024)
    assert "already enrolled" in exc_info.value.message
    enrollment_manager.create_enrollment(student.user_id, school_class.class_id, 2025)


def test_subject_from_other_class_is_rejected(
    db, enrollment_manager, school_class, make_class, teacher, student
):
    other = make_class()
    foreign = SubjectManager(db).create_subject("Art", "ART", other.class_id, teacher.user_id)
    with pytest.raises(ValidationError):
        enrollment_manager.create_enrollment(
            student.user_id, school_class.class_id, 2024, subject_ids=[foreign.subject_id]
        )


def test_add_and_remove_subject(enrollment_manager, school_class, subject, student):
    enrollment = enrollment_manager.create_enrollment(student.user_id, school_class.class_id, 2024)
    enrollment = enrollment_manager.add_subject(enrollment.enrollment_id, subject.subject_id)
    assert len(enrollment.subjects) == 1
    with pytest.raises(AlreadyEnrolledInSubjectError):
        enrollment_manager.add_subject(enrollment.enrollment_id, subject.subject_id)

    enrollment = enrollment_manager.remove_subject(enrollment.enrollment_id, subject.subject_id)
    assert enrollment.subjects == []


def test_delete_enrollment(enrollment_manager, school_class, student):
    enrollment = enrollment_manager.create_enrollment(student.user_id, school_class.class_id, 2024)
    enrollment_manager.delete_enrollment(enrollment.enrollment_id)
    with pytest.raises(NotFoundError):
        enrollment_manager.get_enrollment(enrollment.enrollment_id)
