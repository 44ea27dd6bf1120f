"""Exam and grade management utilities.

Grades belong to exams: deleting an exam deletes its grades, and every grade
carries a letter derived from its marks and the exam's maximum marks.
"""

import datetime as dt
import logging
from collections import Counter
from typing import List, Optional

from sqlalchemy.orm import Session

from core.exceptions import BusinessRuleViolation, DuplicateGradeError, NotFoundError
from models.base import generate_id
from models.exam import ExamModel
from models.grade import GradeModel
from schemas.common import Page, PageQuery
from schemas.exam import ExamInfo, ExamStatus, ExamType, GradeInfo, GradeStatistics
from utils.grading import compute_letter_grade
from utils.integrity import (
    commit_unique,
    ensure_marks_within,
    require_class,
    require_student,
    require_subject_in_class,
    require_user,
)
from utils.pagination import paginate
from utils.timeutils import to_utc_iso, utc_now_iso

logger = logging.getLogger(__name__)

EXAM_SORT_FIELDS = ("created_at", "updated_at", "date", "name", "max_marks", "exam_type", "status")
GRADE_SORT_FIELDS = ("created_at", "updated_at", "graded_at", "marks", "grade")


def _day_start(value: dt.date) -> str:
    return to_utc_iso(dt.datetime.combine(value, dt.time.min))


def _day_end(value: dt.date) -> str:
    return to_utc_iso(dt.datetime.combine(value, dt.time.max))


class ExamManager:
    """Manages exams and the grades recorded against them."""

    def __init__(self, db: Session):
        self.db = db

    # --- Exams ---

    def create_exam(
        self,
        name: str,
        class_id: str,
        subject_id: str,
        date: dt.datetime,
        max_marks: int,
        duration: int,
        exam_type: ExamType,
        created_by_id: str,
        instructions: Optional[str] = None,
        status: Optional[ExamStatus] = None,
    ) -> ExamModel:
        """Schedule an exam for a subject of a class.

        Raises:
            NotFoundError: If the class or creator does not exist, or the
                subject is not assigned to the class.
        """
        require_class(self.db, class_id)
        require_subject_in_class(self.db, subject_id, class_id)
        require_user(self.db, created_by_id)

        now = utc_now_iso()
        model = ExamModel(
            exam_id=generate_id(),
            name=name.strip(),
            class_id=class_id,
            subject_id=subject_id,
            date=to_utc_iso(date),
            max_marks=max_marks,
            duration=duration,
            exam_type=ExamType(exam_type).value,
            instructions=instructions,
            status=(status or ExamStatus.SCHEDULED).value,
            created_by_id=created_by_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created exam %s for subject %s", model.exam_id, subject_id)
        return model

    def get_exam(self, exam_id: str) -> ExamModel:
        model = self.db.get(ExamModel, exam_id)
        if model is None:
            raise NotFoundError("Exam not found")
        return model

    def list_exams(
        self,
        params: Optional[PageQuery] = None,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        exam_type: Optional[ExamType] = None,
        status: Optional[ExamStatus] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> Page[ExamInfo]:
        query = self.db.query(ExamModel)
        if class_id:
            query = query.filter(ExamModel.class_id == class_id)
        if subject_id:
            query = query.filter(ExamModel.subject_id == subject_id)
        if exam_type:
            query = query.filter(ExamModel.exam_type == exam_type.value)
        if status:
            query = query.filter(ExamModel.status == status.value)
        if start_date:
            query = query.filter(ExamModel.date >= _day_start(start_date))
        if end_date:
            query = query.filter(ExamModel.date <= _day_end(end_date))
        items, pagination = paginate(query, ExamModel, params, EXAM_SORT_FIELDS)
        return Page[ExamInfo](
            items=[ExamInfo.model_validate(m) for m in items], pagination=pagination
        )

    def update_exam(
        self,
        exam_id: str,
        name: Optional[str] = None,
        date: Optional[dt.datetime] = None,
        max_marks: Optional[int] = None,
        duration: Optional[int] = None,
        exam_type: Optional[ExamType] = None,
        instructions: Optional[str] = None,
        status: Optional[ExamStatus] = None,
    ) -> ExamModel:
        """Update an exam. None leaves a field unchanged.

        Changing max_marks recomputes the letters of existing grades.

        Raises:
            NotFoundError: If the exam does not exist.
            BusinessRuleViolation: If max_marks would fall below the marks of
                an existing grade.
        """
        model = self.get_exam(exam_id)

        if max_marks is not None and max_marks != model.max_marks:
            if any(grade.marks > max_marks for grade in model.grades):
                raise BusinessRuleViolation(
                    "Maximum marks cannot be lower than existing grade marks"
                )
            model.max_marks = max_marks
            for grade in model.grades:
                grade.grade = compute_letter_grade(grade.marks, max_marks)

        if name is not None:
            model.name = name.strip()
        if date is not None:
            model.date = to_utc_iso(date)
        if duration is not None:
            model.duration = duration
        if exam_type is not None:
            model.exam_type = exam_type.value
        if instructions is not None:
            model.instructions = instructions
        if status is not None:
            model.status = status.value
        model.updated_at = utc_now_iso()

        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated exam %s", exam_id)
        return model

    def delete_exam(self, exam_id: str) -> None:
        model = self.get_exam(exam_id)
        grade_count = len(model.grades)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted exam %s and %d grades", exam_id, grade_count)

    def list_exam_grades(self, exam_id: str) -> List[GradeInfo]:
        exam = self.get_exam(exam_id)
        grades = sorted(
            exam.grades,
            key=lambda g: (g.student.first_name, g.student.last_name) if g.student else ("", ""),
        )
        return [GradeInfo.model_validate(g) for g in grades]

    def get_statistics(self, exam_id: str) -> GradeStatistics:
        """Marks statistics and letter distribution of an exam's grades.

        Raises:
            NotFoundError: If the exam does not exist.
        """
        exam = self.get_exam(exam_id)
        marks = [g.marks for g in exam.grades]
        if not marks:
            return GradeStatistics(
                total_students=0,
                graded_students=0,
                average_marks=0,
                highest_marks=0,
                lowest_marks=0,
                grade_distribution={},
            )
        return GradeStatistics(
            total_students=len(marks),
            graded_students=len(marks),
            average_marks=round(sum(marks) / len(marks), 2),
            highest_marks=max(marks),
            lowest_marks=min(marks),
            grade_distribution=dict(Counter(g.grade for g in exam.grades)),
        )

    # --- Grades ---

    def create_grade(
        self,
        exam_id: str,
        student_id: str,
        marks: float,
        graded_by_id: str,
        remarks: Optional[str] = None,
    ) -> GradeModel:
        """Record a student's marks in an exam.

        Raises:
            DuplicateGradeError: If the student already has a grade for the
                exam.
            NotFoundError: If the exam, student or grader does not exist.
            BusinessRuleViolation: If the user is not a STUDENT or the marks
                exceed the exam's maximum.
        """
        existing = (
            self.db.query(GradeModel)
            .filter(GradeModel.exam_id == exam_id, GradeModel.student_id == student_id)
            .first()
        )
        if existing is not None:
            raise DuplicateGradeError()
        exam = self.get_exam(exam_id)
        require_student(self.db, student_id)
        ensure_marks_within(marks, exam.max_marks)
        require_user(self.db, graded_by_id)

        now = utc_now_iso()
        model = GradeModel(
            grade_id=generate_id(),
            exam_id=exam_id,
            student_id=student_id,
            marks=marks,
            grade=compute_letter_grade(marks, exam.max_marks),
            remarks=remarks,
            graded_by_id=graded_by_id,
            graded_at=now,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        commit_unique(self.db, DuplicateGradeError.default_message)
        self.db.refresh(model)
        logger.info("Graded student %s in exam %s: %s", student_id, exam_id, model.grade)
        return model

    def get_grade(self, grade_id: str) -> GradeModel:
        model = self.db.get(GradeModel, grade_id)
        if model is None:
            raise NotFoundError("Grade not found")
        return model

    def list_grades(
        self,
        params: Optional[PageQuery] = None,
        exam_id: Optional[str] = None,
        student_id: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> Page[GradeInfo]:
        query = self.db.query(GradeModel)
        if exam_id:
            query = query.filter(GradeModel.exam_id == exam_id)
        if student_id:
            query = query.filter(GradeModel.student_id == student_id)
        if grade:
            query = query.filter(GradeModel.grade == grade)
        items, pagination = paginate(query, GradeModel, params, GRADE_SORT_FIELDS)
        return Page[GradeInfo](
            items=[GradeInfo.model_validate(m) for m in items], pagination=pagination
        )

    def list_student_grades(
        self,
        student_id: str,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        exam_type: Optional[ExamType] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> List[GradeInfo]:
        """A student's grades, newest exam first, filtered by exam attributes."""
        query = (
            self.db.query(GradeModel)
            .join(ExamModel, ExamModel.exam_id == GradeModel.exam_id)
            .filter(GradeModel.student_id == student_id)
        )
        if class_id:
            query = query.filter(ExamModel.class_id == class_id)
        if subject_id:
            query = query.filter(ExamModel.subject_id == subject_id)
        if exam_type:
            query = query.filter(ExamModel.exam_type == exam_type.value)
        if start_date:
            query = query.filter(ExamModel.date >= _day_start(start_date))
        if end_date:
            query = query.filter(ExamModel.date <= _day_end(end_date))
        models = query.order_by(ExamModel.date.desc()).all()
        return [GradeInfo.model_validate(m) for m in models]

    def update_grade(
        self,
        grade_id: str,
        marks: Optional[float] = None,
        remarks: Optional[str] = None,
    ) -> GradeModel:
        """Update a grade's marks or remarks, recomputing the letter.

        Raises:
            NotFoundError: If the grade does not exist.
            BusinessRuleViolation: If the marks exceed the exam's maximum.
        """
        model = self.get_grade(grade_id)
        if marks is not None:
            ensure_marks_within(marks, model.exam.max_marks)
            model.marks = marks
            model.grade = compute_letter_grade(marks, model.exam.max_marks)
        if remarks is not None:
            model.remarks = remarks
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated grade %s", grade_id)
        return model

    def delete_grade(self, grade_id: str) -> None:
        model = self.get_grade(grade_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted grade %s", grade_id)
