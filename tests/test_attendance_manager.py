import datetime as dt

import pytest

from core.exceptions import BusinessRuleViolation, ConflictError
from schemas.attendance import AttendanceStatus, BulkAttendanceRecord
from schemas.user import Role
from utils.attendance_manager import AttendanceManager

DAY = dt.date(2024, 9, 2)


@pytest.fixture
def attendance_manager(db):
    return AttendanceManager(db)


def test_one_record_per_student_class_and_day(attendance_manager, school_class, student, teacher):
    record = attendance_manager.create_attendance(
        DAY, school_class.class_id, student.user_id, AttendanceStatus.PRESENT, teacher.user_id
    )
    assert record.date == "2024-09-02"
    with pytest.raises(ConflictError):
        attendance_manager.create_attendance(
            DAY, school_class.class_id, student.user_id, AttendanceStatus.LATE, teacher.user_id
        )


def test_attendance_for_non_student(attendance_manager, school_class, teacher):
    with pytest.raises(BusinessRuleViolation):
        attendance_manager.create_attendance(
            DAY, school_class.class_id, teacher.user_id, AttendanceStatus.PRESENT, teacher.user_id
        )


def test_bulk_marking_overwrites_existing(
    attendance_manager, school_class, make_user, teacher
):
    s1, s2 = make_user(Role.STUDENT), make_user(Role.STUDENT)
    attendance_manager.create_attendance(
        DAY, school_class.class_id, s1.user_id, AttendanceStatus.ABSENT, teacher.user_id
    )
    records = attendance_manager.mark_bulk(
        DAY,
        school_class.class_id,
        [
            BulkAttendanceRecord(student_id=s1.user_id, status=AttendanceStatus.PRESENT),
            BulkAttendanceRecord(student_id=s2.user_id, status=AttendanceStatus.ABSENT),
            BulkAttendanceRecord(student_id=s2.user_id, status=AttendanceStatus.LATE),
        ],
        teacher.user_id,
    )
    assert {r.student_id: r.status for r in records} == {
        s1.user_id: "PRESENT",
        s2.user_id: "LATE",
    }
    assert len(attendance_manager.list_class_attendance(school_class.class_id, DAY)) == 2


def test_report_percentage(attendance_manager, school_class, student, teacher):
    statuses = [
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
    ]
    for offset, status in enumerate(statuses):
        attendance_manager.create_attendance(
            DAY + dt.timedelta(days=offset),
            school_class.class_id,
            student.user_id,
            status,
            teacher.user_id,
        )

    report = attendance_manager.get_report(student_id=student.user_id)
    assert report.summary.total_records == 3
    assert report.summary.present_count == 2
    assert report.summary.absent_count == 1
    assert report.summary.attendance_percentage == 66.67

    later = attendance_manager.get_report(
        student_id=student.user_id, start_date=DAY + dt.timedelta(days=1)
    )
    assert later.summary.total_records == 2


def test_empty_report(attendance_manager, school_class):
    report = attendance_manager.get_report(class_id=school_class.class_id)
    assert report.summary.total_records == 0
    assert report.summary.attendance_percentage == 0
