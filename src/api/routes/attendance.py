"""Attendance routes."""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import AttendanceManagerDep
from schemas.attendance import (
    AttendanceInfo,
    AttendanceReport,
    AttendanceStatus,
    BulkAttendanceRequest,
    CreateAttendanceRequest,
    UpdateAttendanceRequest,
)
from schemas.common import MessageResponse, Page

router = APIRouter(prefix=f"{API_PREFIX}/attendance", tags=["Attendance"])


@router.get("", response_model=Page[AttendanceInfo], summary="List attendance records")
def list_attendance(
    identity: CurrentIdentity,
    attendance_manager: AttendanceManagerDep,
    params: PageParams,
    class_id: Optional[str] = None,
    student_id: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    marked_by_id: Optional[str] = None,
    date: Optional[dt.date] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> Page[AttendanceInfo]:
    return attendance_manager.list_attendance(
        params,
        class_id=class_id,
        student_id=student_id,
        status=status,
        marked_by_id=marked_by_id,
        date=date,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/report", response_model=AttendanceReport, summary="Attendance report")
def get_report(
    identity: CurrentIdentity,
    attendance_manager: AttendanceManagerDep,
    class_id: Optional[str] = None,
    student_id: Optional[str] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> AttendanceReport:
    return attendance_manager.get_report(
        class_id=class_id, student_id=student_id, start_date=start_date, end_date=end_date
    )


@router.get(
    "/student/{student_id}",
    response_model=List[AttendanceInfo],
    summary="List a student's attendance",
)
def list_student_attendance(
    student_id: str,
    identity: CurrentIdentity,
    attendance_manager: AttendanceManagerDep,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> List[AttendanceInfo]:
    return attendance_manager.list_student_attendance(
        student_id, start_date=start_date, end_date=end_date
    )


@router.get(
    "/class/{class_id}",
    response_model=List[AttendanceInfo],
    summary="List a class's attendance",
)
def list_class_attendance(
    class_id: str,
    identity: CurrentIdentity,
    attendance_manager: AttendanceManagerDep,
    date: Optional[dt.date] = None,
) -> List[AttendanceInfo]:
    return attendance_manager.list_class_attendance(class_id, date=date)


@router.get("/{attendance_id}", response_model=AttendanceInfo, summary="Get an attendance record")
def get_attendance(
    attendance_id: str, identity: CurrentIdentity, attendance_manager: AttendanceManagerDep
) -> AttendanceInfo:
    return AttendanceInfo.model_validate(attendance_manager.get_attendance(attendance_id))


@router.post(
    "",
    response_model=AttendanceInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Mark attendance",
)
def create_attendance(
    req: CreateAttendanceRequest,
    identity: TeacherIdentity,
    attendance_manager: AttendanceManagerDep,
) -> AttendanceInfo:
    """Mark one student's attendance. The caller is recorded as the marker."""
    model = attendance_manager.create_attendance(
        date=req.date,
        class_id=req.class_id,
        student_id=req.student_id,
        status=req.status,
        marked_by_id=identity.user_id,
        remarks=req.remarks,
    )
    return AttendanceInfo.model_validate(model)


@router.post(
    "/bulk",
    response_model=List[AttendanceInfo],
    status_code=status.HTTP_201_CREATED,
    summary="Mark attendance for a class",
)
def mark_bulk_attendance(
    req: BulkAttendanceRequest,
    identity: TeacherIdentity,
    attendance_manager: AttendanceManagerDep,
) -> List[AttendanceInfo]:
    models = attendance_manager.mark_bulk(
        date=req.date,
        class_id=req.class_id,
        records=req.records,
        marked_by_id=identity.user_id,
    )
    return [AttendanceInfo.model_validate(m) for m in models]


@router.patch("/{attendance_id}", response_model=AttendanceInfo, summary="Update attendance")
def update_attendance(
    attendance_id: str,
    req: UpdateAttendanceRequest,
    identity: TeacherIdentity,
    attendance_manager: AttendanceManagerDep,
) -> AttendanceInfo:
    model = attendance_manager.update_attendance(
        attendance_id, status=req.status, remarks=req.remarks
    )
    return AttendanceInfo.model_validate(model)


@router.delete(
    "/{attendance_id}", response_model=MessageResponse, summary="Delete an attendance record"
)
def delete_attendance(
    attendance_id: str, identity: AdminIdentity, attendance_manager: AttendanceManagerDep
) -> MessageResponse:
    attendance_manager.delete_attendance(attendance_id)
    return MessageResponse(message="Attendance record deleted successfully")
