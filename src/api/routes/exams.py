"""Exam routes."""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import ExamManagerDep
from schemas.common import MessageResponse, Page
from schemas.exam import (
    CreateExamRequest,
    ExamInfo,
    ExamStatus,
    ExamType,
    GradeInfo,
    GradeStatistics,
    UpdateExamRequest,
)

router = APIRouter(prefix=f"{API_PREFIX}/exams", tags=["Exams"])


@router.get("", response_model=Page[ExamInfo], summary="List exams")
def list_exams(
    identity: CurrentIdentity,
    exam_manager: ExamManagerDep,
    params: PageParams,
    class_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    exam_type: Optional[ExamType] = None,
    status: Optional[ExamStatus] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> Page[ExamInfo]:
    return exam_manager.list_exams(
        params,
        class_id=class_id,
        subject_id=subject_id,
        exam_type=exam_type,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{exam_id}", response_model=ExamInfo, summary="Get an exam")
def get_exam(exam_id: str, identity: CurrentIdentity, exam_manager: ExamManagerDep) -> ExamInfo:
    return ExamInfo.model_validate(exam_manager.get_exam(exam_id))


@router.get("/{exam_id}/grades", response_model=List[GradeInfo], summary="List an exam's grades")
def list_exam_grades(
    exam_id: str, identity: CurrentIdentity, exam_manager: ExamManagerDep
) -> List[GradeInfo]:
    return exam_manager.list_exam_grades(exam_id)


@router.get(
    "/{exam_id}/statistics",
    response_model=GradeStatistics,
    summary="Grade statistics of an exam",
)
def get_exam_statistics(
    exam_id: str, identity: CurrentIdentity, exam_manager: ExamManagerDep
) -> GradeStatistics:
    return exam_manager.get_statistics(exam_id)


@router.post(
    "",
    response_model=ExamInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create an exam",
)
def create_exam(
    req: CreateExamRequest, identity: TeacherIdentity, exam_manager: ExamManagerDep
) -> ExamInfo:
    model = exam_manager.create_exam(
        name=req.name,
        class_id=req.class_id,
        subject_id=req.subject_id,
        date=req.date,
        max_marks=req.max_marks,
        duration=req.duration,
        exam_type=req.exam_type,
        created_by_id=identity.user_id,
        instructions=req.instructions,
        status=req.status,
    )
    return ExamInfo.model_validate(model)


@router.patch("/{exam_id}", response_model=ExamInfo, summary="Update an exam")
def update_exam(
    exam_id: str,
    req: UpdateExamRequest,
    identity: TeacherIdentity,
    exam_manager: ExamManagerDep,
) -> ExamInfo:
    model = exam_manager.update_exam(
        exam_id,
        name=req.name,
        date=req.date,
        max_marks=req.max_marks,
        duration=req.duration,
        exam_type=req.exam_type,
        instructions=req.instructions,
        status=req.status,
    )
    return ExamInfo.model_validate(model)


@router.delete("/{exam_id}", response_model=MessageResponse, summary="Delete an exam")
def delete_exam(
    exam_id: str, identity: AdminIdentity, exam_manager: ExamManagerDep
) -> MessageResponse:
    """Delete an exam together with its grades."""
    exam_manager.delete_exam(exam_id)
    return MessageResponse(message="Exam deleted successfully")
