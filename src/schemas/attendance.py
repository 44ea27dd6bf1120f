"""Attendance schema definitions."""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import ClassRef, UserRef


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class AttendanceInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attendance_id: str
    date: str
    class_id: str
    school_class: Optional[ClassRef] = None
    student_id: str
    student: Optional[UserRef] = None
    status: AttendanceStatus
    marked_by_id: str
    marked_by: Optional[UserRef] = None
    remarks: Optional[str] = None
    created_at: str
    updated_at: str


class CreateAttendanceRequest(BaseModel):
    date: dt.date
    class_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    status: AttendanceStatus
    remarks: Optional[str] = Field(default=None, max_length=200)


class UpdateAttendanceRequest(BaseModel):
    status: Optional[AttendanceStatus] = None
    remarks: Optional[str] = Field(default=None, max_length=200)


class BulkAttendanceRecord(BaseModel):
    student_id: str = Field(..., min_length=1)
    status: AttendanceStatus
    remarks: Optional[str] = Field(default=None, max_length=200)


class BulkAttendanceRequest(BaseModel):
    date: dt.date
    class_id: str = Field(..., min_length=1)
    records: List[BulkAttendanceRecord] = Field(..., min_length=1)


class AttendanceSummary(BaseModel):
    total_records: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    attendance_percentage: float


class AttendanceReport(BaseModel):
    summary: AttendanceSummary
    records: List[AttendanceInfo]
