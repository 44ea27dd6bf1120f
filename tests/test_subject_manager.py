import pytest

from core.exceptions import BusinessRuleViolation, ConflictError, NotFoundError
from utils.subject_manager import SubjectManager


@pytest.fixture
def subject_manager(db):
    return SubjectManager(db)


def test_code_is_upper_cased(subject):
    assert subject.code == "MATH101"
    assert subject.credits >= 1
    assert subject.status == "ACTIVE"


def test_code_unique_within_class(subject_manager, subject, make_class, teacher):
    with pytest.raises(ConflictError):
        subject_manager.create_subject("Algebra", "Math101", subject.class_id, teacher.user_id)

    other = make_class()
    copy = subject_manager.create_subject("Mathematics", "MATH101", other.class_id, teacher.user_id)
    assert copy.class_id == other.class_id


def test_subject_references(subject_manager, school_class, student):
    with pytest.raises(NotFoundError):
        subject_manager.create_subject("Art", "ART", "missing", student.user_id)
    with pytest.raises(BusinessRuleViolation):
        subject_manager.create_subject("Art", "ART", school_class.class_id, student.user_id)


def test_update_and_delete(subject_manager, subject):
    updated = subject_manager.update_subject(subject.subject_id, name="Geometry", credits=4)
    assert updated.name == "Geometry"
    assert updated.credits == 4

    subject_manager.delete_subject(subject.subject_id)
    with pytest.raises(NotFoundError):
        subject_manager.get_subject(subject.subject_id)


def test_list_subjects_by_class(subject_manager, subject, make_class, teacher):
    other = make_class()
    subject_manager.create_subject("Biology", "BIO", other.class_id, teacher.user_id)
    page = subject_manager.list_subjects(class_id=subject.class_id)
    assert [s.code for s in page.items] == ["MATH101"]
