"""Enrollment management utilities.

An enrollment records a student taking a class in an academic year, together
with the subjects of that class the student follows.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.exceptions import AlreadyEnrolledInSubjectError, ConflictError, NotFoundError
from models.base import generate_id
from models.enrollment import EnrollmentModel
from schemas.common import Page, PageQuery
from schemas.enrollment import EnrollmentInfo, EnrollmentStatus
from utils.integrity import (
    commit_unique,
    require_class,
    require_student,
    require_subject_in_class,
    require_subjects_in_class,
)
from utils.pagination import paginate
from utils.timeutils import utc_now_iso

logger = logging.getLogger(__name__)

ENROLLMENT_SORT_FIELDS = ("created_at", "updated_at", "enrolled_at", "academic_year", "status")
DUPLICATE_ENROLLMENT_MESSAGE = "Student is already enrolled in this class for this academic year"


class EnrollmentManager:
    """Manages student enrollments."""

    def __init__(self, db: Session):
        self.db = db

    def create_enrollment(
        self,
        student_id: str,
        class_id: str,
        academic_year: int,
        subject_ids: Optional[List[str]] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> EnrollmentModel:
        """Enroll a student in a class for an academic year.

        Raises:
            ConflictError: If the student is already enrolled in the class
                that year.
            NotFoundError: If the student or class does not exist.
            BusinessRuleViolation: If the user is not a STUDENT.
            ValidationError: If a subject is not assigned to the class.
        """
        existing = (
            self.db.query(EnrollmentModel)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.class_id == class_id,
                EnrollmentModel.academic_year == academic_year,
            )
            .first()
        )
        if existing is not None:
            raise ConflictError(DUPLICATE_ENROLLMENT_MESSAGE)

        require_student(self.db, student_id)
        require_class(self.db, class_id)
        subjects = require_subjects_in_class(self.db, subject_ids or [], class_id)

        now = utc_now_iso()
        model = EnrollmentModel(
            enrollment_id=generate_id(),
            student_id=student_id,
            class_id=class_id,
            academic_year=academic_year,
            status=(status or EnrollmentStatus.ACTIVE).value,
            enrolled_at=now,
            created_at=now,
            updated_at=now,
        )
        model.subjects = subjects
        self.db.add(model)
        commit_unique(self.db, DUPLICATE_ENROLLMENT_MESSAGE)
        self.db.refresh(model)
        logger.info(
            "Enrolled student %s in class %s for %s", student_id, class_id, academic_year
        )
        return model

    def get_enrollment(self, enrollment_id: str) -> EnrollmentModel:
        model = self.db.get(EnrollmentModel, enrollment_id)
        if model is None:
            raise NotFoundError("Enrollment not found")
        return model

    def list_enrollments(
        self,
        params: Optional[PageQuery] = None,
        student_id: Optional[str] = None,
        class_id: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
        academic_year: Optional[int] = None,
    ) -> Page[EnrollmentInfo]:
        query = self.db.query(EnrollmentModel)
        if student_id:
            query = query.filter(EnrollmentModel.student_id == student_id)
        if class_id:
            query = query.filter(EnrollmentModel.class_id == class_id)
        if status:
            query = query.filter(EnrollmentModel.status == status.value)
        if academic_year is not None:
            query = query.filter(EnrollmentModel.academic_year == academic_year)
        items, pagination = paginate(query, EnrollmentModel, params, ENROLLMENT_SORT_FIELDS)
        return Page[EnrollmentInfo](
            items=[EnrollmentInfo.model_validate(m) for m in items], pagination=pagination
        )

    def list_student_enrollments(
        self, student_id: str, academic_year: Optional[int] = None
    ) -> List[EnrollmentInfo]:
        query = self.db.query(EnrollmentModel).filter(EnrollmentModel.student_id == student_id)
        if academic_year is not None:
            query = query.filter(EnrollmentModel.academic_year == academic_year)
        models = query.order_by(EnrollmentModel.academic_year.desc()).all()
        return [EnrollmentInfo.model_validate(m) for m in models]

    def list_class_enrollments(
        self,
        class_id: str,
        academic_year: Optional[int] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> List[EnrollmentInfo]:
        query = self.db.query(EnrollmentModel).filter(EnrollmentModel.class_id == class_id)
        if academic_year is not None:
            query = query.filter(EnrollmentModel.academic_year == academic_year)
        if status:
            query = query.filter(EnrollmentModel.status == status.value)
        models = query.order_by(EnrollmentModel.enrolled_at.desc()).all()
        return [EnrollmentInfo.model_validate(m) for m in models]

    def update_enrollment(
        self,
        enrollment_id: str,
        subject_ids: Optional[List[str]] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> EnrollmentModel:
        """Replace the subject list and/or change the status.

        Raises:
            NotFoundError: If the enrollment does not exist.
            ValidationError: If a subject is not assigned to the class.
        """
        model = self.get_enrollment(enrollment_id)
        if subject_ids is not None:
            model.subjects = require_subjects_in_class(self.db, subject_ids, model.class_id)
        if status is not None:
            model.status = status.value
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated enrollment %s", enrollment_id)
        return model

    def delete_enrollment(self, enrollment_id: str) -> None:
        model = self.get_enrollment(enrollment_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted enrollment %s", enrollment_id)

    def add_subject(self, enrollment_id: str, subject_id: str) -> EnrollmentModel:
        """Add one subject of the enrollment's class.

        Raises:
            NotFoundError: If the enrollment does not exist or the subject is
                not assigned to the class.
            AlreadyEnrolledInSubjectError: If the subject is already listed.
        """
        model = self.get_enrollment(enrollment_id)
        subject = require_subject_in_class(self.db, subject_id, model.class_id)
        if any(s.subject_id == subject_id for s in model.subjects):
            raise AlreadyEnrolledInSubjectError()

        model.subjects.append(subject)
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Added subject %s to enrollment %s", subject_id, enrollment_id)
        return model

    def remove_subject(self, enrollment_id: str, subject_id: str) -> EnrollmentModel:
        model = self.get_enrollment(enrollment_id)
        model.subjects = [s for s in model.subjects if s.subject_id != subject_id]
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Removed subject %s from enrollment %s", subject_id, enrollment_id)
        return model
