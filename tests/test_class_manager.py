import pytest

from core.exceptions import (
    AlreadyEnrolledError,
    BusinessRuleViolation,
    CapacityExceededError,
    ConflictError,
    NotFoundError,
)
from models.user import UserModel
from schemas.common import PageQuery
from schemas.user import Role
from utils.class_manager import ClassManager, class_ids_for_user


@pytest.fixture
def class_manager(db):
    return ClassManager(db)


def test_create_class_defaults(school_class, teacher):
    assert school_class.capacity == 30
    assert school_class.status == "ACTIVE"
    assert school_class.class_teacher_id == teacher.user_id
    assert school_class.display_name == f"{school_class.name} - A"


def test_duplicate_name_section_year(class_manager, make_class, teacher):
    make_class(name="Grade 7", section="B", year=2025)
    with pytest.raises(ConflictError):
        class_manager.create_class("Grade 7", "B", 2025, teacher.user_id)
    # Another year is a different class
    class_manager.create_class("Grade 7", "B", 2026, teacher.user_id)


def test_class_teacher_must_be_teacher(class_manager, student):
    with pytest.raises(BusinessRuleViolation):
        class_manager.create_class("Grade 1", "A", 2024, student.user_id)
    with pytest.raises(NotFoundError):
        class_manager.create_class("Grade 1", "A", 2024, "missing")


def test_capacity_is_enforced(class_manager, make_class, make_user, db):
    school_class = make_class(capacity=2)
    s1, s2, s3 = (make_user(Role.STUDENT) for _ in range(3))

    class_manager.add_student(school_class.class_id, s1.user_id)
    with pytest.raises(AlreadyEnrolledError):
        class_manager.add_student(school_class.class_id, s1.user_id)
    class_manager.add_student(school_class.class_id, s2.user_id)
    with pytest.raises(CapacityExceededError):
        class_manager.add_student(school_class.class_id, s3.user_id)

    students = class_manager.list_students(school_class.class_id)
    assert {s.user_id for s in students} == {s1.user_id, s2.user_id}
    assert db.get(UserModel, s1.user_id).class_id == school_class.class_id


def test_add_non_student(class_manager, school_class, make_user):
    parent = make_user(Role.PARENT)
    with pytest.raises(BusinessRuleViolation):
        class_manager.add_student(school_class.class_id, parent.user_id)


def test_capacity_cannot_drop_below_students(class_manager, make_class, make_user):
    school_class = make_class(capacity=3)
    for _ in range(2):
        class_manager.add_student(school_class.class_id, make_user(Role.STUDENT).user_id)
    with pytest.raises(BusinessRuleViolation):
        class_manager.update_class(school_class.class_id, capacity=1)
    updated = class_manager.update_class(school_class.class_id, capacity=2)
    assert updated.capacity == 2


def test_rejected_update_changes_nothing(class_manager, make_class, make_user, teacher, db):
    school_class = make_class(capacity=2)
    for _ in range(2):
        class_manager.add_student(school_class.class_id, make_user(Role.STUDENT).user_id)
    new_teacher = make_user(Role.TEACHER)

    with pytest.raises(BusinessRuleViolation):
        class_manager.update_class(
            school_class.class_id,
            name="Renamed",
            class_teacher_id=new_teacher.user_id,
            capacity=1,
        )
    assert not db.dirty
    assert school_class.class_teacher_id == teacher.user_id
    assert school_class.name != "Renamed"
    assert school_class.capacity == 2


def test_update_class_uniqueness(class_manager, make_class):
    make_class(name="Grade 1")
    other = make_class(name="Grade 2")
    with pytest.raises(ConflictError):
        class_manager.update_class(other.class_id, name="Grade 1")


def test_delete_class_with_students(class_manager, school_class, student):
    class_manager.add_student(school_class.class_id, student.user_id)
    with pytest.raises(BusinessRuleViolation):
        class_manager.delete_class(school_class.class_id)

    class_manager.remove_student(school_class.class_id, student.user_id)
    class_manager.delete_class(school_class.class_id)
    with pytest.raises(NotFoundError):
        class_manager.get_class(school_class.class_id)


def test_remove_student_clears_current_class(class_manager, school_class, student, db):
    class_manager.add_student(school_class.class_id, student.user_id)
    class_manager.remove_student(school_class.class_id, student.user_id)
    assert db.get(UserModel, student.user_id).class_id is None
    # Removing a non-member is a no-op
    class_manager.remove_student(school_class.class_id, student.user_id)


def test_class_ids_for_user(class_manager, make_class, student, db):
    first, second = make_class(), make_class()
    class_manager.add_student(first.class_id, student.user_id)
    class_manager.add_student(second.class_id, student.user_id)
    ids = class_ids_for_user(db, db.get(UserModel, student.user_id))
    assert set(ids) == {first.class_id, second.class_id}


def test_list_classes_filters_and_paginates(class_manager, make_class):
    for i in range(3):
        make_class(name=f"Grade {i}", year=2024)
    make_class(name="Senior", year=2025)

    page = class_manager.list_classes(PageQuery(limit=2, sort_by="name", sort_order="asc"), year=2024)
    assert page.pagination.total == 3
    assert page.pagination.pages == 2
    assert page.pagination.has_next
    assert [c.name for c in page.items] == ["Grade 0", "Grade 1"]

    found = class_manager.list_classes(search="sen")
    assert [c.name for c in found.items] == ["Senior"]
