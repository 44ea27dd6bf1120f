"""Attendance management utilities."""

import datetime as dt
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from core.exceptions import ConflictError, NotFoundError
from models.attendance import AttendanceModel
from models.base import generate_id
from schemas.attendance import (
    AttendanceInfo,
    AttendanceReport,
    AttendanceStatus,
    AttendanceSummary,
    BulkAttendanceRecord,
)
from schemas.common import Page, PageQuery
from utils.integrity import commit_unique, require_class, require_student, require_user
from utils.pagination import paginate
from utils.timeutils import to_date_iso, utc_now_iso

logger = logging.getLogger(__name__)

ATTENDANCE_SORT_FIELDS = ("created_at", "updated_at", "date", "status")
DUPLICATE_ATTENDANCE_MESSAGE = "Attendance already marked for this student on this date"
MARKER_NOT_FOUND_MESSAGE = "User who marked attendance not found"


def _filter_dates(
    query: Query, start_date: Optional[dt.date], end_date: Optional[dt.date]
) -> Query:
    if start_date:
        query = query.filter(AttendanceModel.date >= to_date_iso(start_date))
    if end_date:
        query = query.filter(AttendanceModel.date <= to_date_iso(end_date))
    return query


class AttendanceManager:
    """Manages daily attendance records."""

    def __init__(self, db: Session):
        self.db = db

    def create_attendance(
        self,
        date: dt.date,
        class_id: str,
        student_id: str,
        status: AttendanceStatus,
        marked_by_id: str,
        remarks: Optional[str] = None,
    ) -> AttendanceModel:
        """Record one student's attendance for a day.

        Raises:
            ConflictError: If attendance is already marked for the student in
                this class on this date.
            NotFoundError: If the student, class or marker does not exist.
            BusinessRuleViolation: If the user is not a STUDENT.
        """
        day = to_date_iso(date)
        if self._find(day, class_id, student_id) is not None:
            raise ConflictError(DUPLICATE_ATTENDANCE_MESSAGE)
        require_student(self.db, student_id)
        require_class(self.db, class_id)
        require_user(self.db, marked_by_id, MARKER_NOT_FOUND_MESSAGE)

        now = utc_now_iso()
        model = AttendanceModel(
            attendance_id=generate_id(),
            date=day,
            class_id=class_id,
            student_id=student_id,
            status=AttendanceStatus(status).value,
            marked_by_id=marked_by_id,
            remarks=remarks,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        commit_unique(self.db, DUPLICATE_ATTENDANCE_MESSAGE)
        self.db.refresh(model)
        logger.info("Marked %s for student %s on %s", model.status, student_id, day)
        return model

    def mark_bulk(
        self,
        date: dt.date,
        class_id: str,
        records: List[BulkAttendanceRecord],
        marked_by_id: str,
    ) -> List[AttendanceModel]:
        """Mark attendance for many students of a class at once.

        Existing records for the same day, class and student are overwritten.
        All records are committed together.

        Raises:
            NotFoundError: If the class, marker or a student does not exist.
            BusinessRuleViolation: If a record names a non-STUDENT user.
        """
        require_class(self.db, class_id)
        require_user(self.db, marked_by_id, MARKER_NOT_FOUND_MESSAGE)
        day = to_date_iso(date)
        now = utc_now_iso()

        results = {}
        for record in records:
            require_student(self.db, record.student_id)
            # A student listed twice keeps the last record
            model = results.get(record.student_id) or self._find(day, class_id, record.student_id)
            if model is None:
                model = AttendanceModel(
                    attendance_id=generate_id(),
                    date=day,
                    class_id=class_id,
                    student_id=record.student_id,
                    created_at=now,
                )
                self.db.add(model)
            model.status = record.status.value
            model.remarks = record.remarks
            model.marked_by_id = marked_by_id
            model.updated_at = now
            results[record.student_id] = model

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(DUPLICATE_ATTENDANCE_MESSAGE) from e
        for model in results.values():
            self.db.refresh(model)
        logger.info("Marked bulk attendance for %d students of class %s on %s", len(results), class_id, day)
        return list(results.values())

    def get_attendance(self, attendance_id: str) -> AttendanceModel:
        model = self.db.get(AttendanceModel, attendance_id)
        if model is None:
            raise NotFoundError("Attendance record not found")
        return model

    def list_attendance(
        self,
        params: Optional[PageQuery] = None,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        marked_by_id: Optional[str] = None,
        date: Optional[dt.date] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> Page[AttendanceInfo]:
        query = self.db.query(AttendanceModel)
        if class_id:
            query = query.filter(AttendanceModel.class_id == class_id)
        if student_id:
            query = query.filter(AttendanceModel.student_id == student_id)
        if status:
            query = query.filter(AttendanceModel.status == status.value)
        if marked_by_id:
            query = query.filter(AttendanceModel.marked_by_id == marked_by_id)
        if date and not (start_date or end_date):
            query = query.filter(AttendanceModel.date == to_date_iso(date))
        query = _filter_dates(query, start_date, end_date)
        items, pagination = paginate(query, AttendanceModel, params, ATTENDANCE_SORT_FIELDS)
        return Page[AttendanceInfo](
            items=[AttendanceInfo.model_validate(m) for m in items], pagination=pagination
        )

    def update_attendance(
        self,
        attendance_id: str,
        status: Optional[AttendanceStatus] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceModel:
        model = self.get_attendance(attendance_id)
        if status is not None:
            model.status = status.value
        if remarks is not None:
            model.remarks = remarks
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated attendance %s", attendance_id)
        return model

    def delete_attendance(self, attendance_id: str) -> None:
        model = self.get_attendance(attendance_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted attendance %s", attendance_id)

    def get_report(
        self,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> AttendanceReport:
        """Summarise attendance over the matching records.

        The attendance percentage counts PRESENT records only and is rounded
        to two decimal places.
        """
        query = self.db.query(AttendanceModel)
        if class_id:
            query = query.filter(AttendanceModel.class_id == class_id)
        if student_id:
            query = query.filter(AttendanceModel.student_id == student_id)
        query = _filter_dates(query, start_date, end_date)
        models = query.order_by(AttendanceModel.date.desc()).all()

        counts = {status: 0 for status in AttendanceStatus}
        for model in models:
            counts[AttendanceStatus(model.status)] += 1
        total = len(models)
        percentage = counts[AttendanceStatus.PRESENT] / total * 100 if total else 0.0

        summary = AttendanceSummary(
            total_records=total,
            present_count=counts[AttendanceStatus.PRESENT],
            absent_count=counts[AttendanceStatus.ABSENT],
            late_count=counts[AttendanceStatus.LATE],
            excused_count=counts[AttendanceStatus.EXCUSED],
            attendance_percentage=round(percentage, 2),
        )
        return AttendanceReport(
            summary=summary,
            records=[AttendanceInfo.model_validate(m) for m in models],
        )

    def list_student_attendance(
        self,
        student_id: str,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> List[AttendanceInfo]:
        query = self.db.query(AttendanceModel).filter(AttendanceModel.student_id == student_id)
        query = _filter_dates(query, start_date, end_date)
        models = query.order_by(AttendanceModel.date.desc()).all()
        return [AttendanceInfo.model_validate(m) for m in models]

    def list_class_attendance(
        self, class_id: str, date: Optional[dt.date] = None
    ) -> List[AttendanceInfo]:
        query = self.db.query(AttendanceModel).filter(AttendanceModel.class_id == class_id)
        if date:
            query = query.filter(AttendanceModel.date == to_date_iso(date))
        models = query.order_by(AttendanceModel.date.desc()).all()
        return [AttendanceInfo.model_validate(m) for m in models]

    def _find(self, day: str, class_id: str, student_id: str) -> Optional[AttendanceModel]:
        return (
            self.db.query(AttendanceModel)
            .filter(
                AttendanceModel.date == day,
                AttendanceModel.class_id == class_id,
                AttendanceModel.student_id == student_id,
            )
            .first()
        )
