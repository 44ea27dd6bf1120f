import datetime as dt

import pytest

from core.exceptions import BusinessRuleViolation, DuplicateGradeError, NotFoundError
from models.grade import GradeModel
from schemas.exam import ExamType
from schemas.user import Role
from utils.exam_manager import ExamManager


@pytest.fixture
def exam_manager(db):
    return ExamManager(db)


def test_exam_subject_must_belong_to_class(exam_manager, make_class, subject, teacher):
    other = make_class()
    with pytest.raises(NotFoundError):
        exam_manager.create_exam(
            name="Quiz",
            class_id=other.class_id,
            subject_id=subject.subject_id,
            date=dt.datetime(2024, 4, 1, 9, 0),
            max_marks=20,
            duration=30,
            exam_type=ExamType.QUIZ,
            created_by_id=teacher.user_id,
        )


def test_grade_letter_is_computed(exam_manager, exam, student, teacher):
    grade = exam_manager.create_grade(exam.exam_id, student.user_id, 52, teacher.user_id)
    assert grade.grade == "C-"
    assert grade.graded_at


def test_marks_above_maximum_write_nothing(exam_manager, exam, student, teacher, db):
    with pytest.raises(BusinessRuleViolation):
        exam_manager.create_grade(exam.exam_id, student.user_id, 101, teacher.user_id)
    assert db.query(GradeModel).count() == 0


def test_one_grade_per_student_and_exam(exam_manager, exam, student, teacher):
    exam_manager.create_grade(exam.exam_id, student.user_id, 80, teacher.user_id)
    with pytest.raises(DuplicateGradeError):
        exam_manager.create_grade(exam.exam_id, student.user_id, 90, teacher.user_id)


def test_update_grade_recomputes_letter(exam_manager, exam, student, teacher):
    grade = exam_manager.create_grade(exam.exam_id, student.user_id, 40, teacher.user_id)
    grade = exam_manager.update_grade(grade.grade_id, marks=95)
    assert grade.grade == "A+"
    with pytest.raises(BusinessRuleViolation):
        exam_manager.update_grade(grade.grade_id, marks=150)


def test_max_marks_change_regrades(exam_manager, exam, student, teacher):
    grade = exam_manager.create_grade(exam.exam_id, student.user_id, 45, teacher.user_id)
    assert grade.grade == "D"

    with pytest.raises(BusinessRuleViolation):
        exam_manager.update_exam(exam.exam_id, max_marks=40)

    exam_manager.update_exam(exam.exam_id, max_marks=50)
    assert exam_manager.get_grade(grade.grade_id).grade == "A+"


def test_statistics(exam_manager, exam, make_user, teacher):
    empty = exam_manager.get_statistics(exam.exam_id)
    assert empty.graded_students == 0
    assert empty.grade_distribution == {}

    for marks in (95, 91, 52):
        exam_manager.create_grade(exam.exam_id, make_user(Role.STUDENT).user_id, marks, teacher.user_id)
    stats = exam_manager.get_statistics(exam.exam_id)
    assert stats.graded_students == 3
    assert stats.average_marks == 79.33
    assert stats.highest_marks == 95
    assert stats.lowest_marks == 52
    assert stats.grade_distribution == {"A+": 2, "C-": 1}


def test_delete_exam_removes_grades(exam_manager, exam, student, teacher, db):
    exam_manager.create_grade(exam.exam_id, student.user_id, 70, teacher.user_id)
    exam_manager.delete_exam(exam.exam_id)
    assert db.query(GradeModel).count() == 0


def test_student_grades_filter_by_exam_type(exam_manager, exam, school_class, subject, student, teacher):
    quiz = exam_manager.create_exam(
        name="Quiz 1",
        class_id=school_class.class_id,
        subject_id=subject.subject_id,
        date=dt.datetime(2024, 2, 1, 9, 0),
        max_marks=10,
        duration=15,
        exam_type=ExamType.QUIZ,
        created_by_id=teacher.user_id,
    )
    exam_manager.create_grade(exam.exam_id, student.user_id, 70, teacher.user_id)
    exam_manager.create_grade(quiz.exam_id, student.user_id, 9, teacher.user_id)

    assert len(exam_manager.list_student_grades(student.user_id)) == 2
    quizzes = exam_manager.list_student_grades(student.user_id, exam_type=ExamType.QUIZ)
    assert [g.exam_id for g in quizzes] == [quiz.exam_id]
    march = exam_manager.list_student_grades(student.user_id, start_date=dt.date(2024, 3, 1))
    assert [g.exam_id for g in march] == [exam.exam_id]
