"""Grade routes."""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import ExamManagerDep
from schemas.common import MessageResponse, Page
from schemas.exam import CreateGradeRequest, ExamType, GradeInfo, UpdateGradeRequest

router = APIRouter(prefix=f"{API_PREFIX}/grades", tags=["Grades"])


@router.get("", response_model=Page[GradeInfo], summary="List grades")
def list_grades(
    identity: CurrentIdentity,
    exam_manager: ExamManagerDep,
    params: PageParams,
    exam_id: Optional[str] = None,
    student_id: Optional[str] = None,
    grade: Optional[str] = None,
) -> Page[GradeInfo]:
    return exam_manager.list_grades(params, exam_id=exam_id, student_id=student_id, grade=grade)


@router.get("/student", response_model=List[GradeInfo], summary="List a student's grades")
def list_student_grades(
    student_id: str,
    identity: CurrentIdentity,
    exam_manager: ExamManagerDep,
    class_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    exam_type: Optional[ExamType] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> List[GradeInfo]:
    return exam_manager.list_student_grades(
        student_id,
        class_id=class_id,
        subject_id=subject_id,
        exam_type=exam_type,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{grade_id}", response_model=GradeInfo, summary="Get a grade")
def get_grade(grade_id: str, identity: CurrentIdentity, exam_manager: ExamManagerDep) -> GradeInfo:
    return GradeInfo.model_validate(exam_manager.get_grade(grade_id))


@router.post(
    "",
    response_model=GradeInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Grade a student",
)
def create_grade(
    req: CreateGradeRequest, identity: TeacherIdentity, exam_manager: ExamManagerDep
) -> GradeInfo:
    """Record marks for a student. The caller is recorded as the grader."""
    model = exam_manager.create_grade(
        exam_id=req.exam_id,
        student_id=req.student_id,
        marks=req.marks,
        graded_by_id=identity.user_id,
        remarks=req.remarks,
    )
    return GradeInfo.model_validate(model)


@router.patch("/{grade_id}", response_model=GradeInfo, summary="Update a grade")
def update_grade(
    grade_id: str,
    req: UpdateGradeRequest,
    identity: TeacherIdentity,
    exam_manager: ExamManagerDep,
) -> GradeInfo:
    model = exam_manager.update_grade(grade_id, marks=req.marks, remarks=req.remarks)
    return GradeInfo.model_validate(model)


@router.delete("/{grade_id}", response_model=MessageResponse, summary="Delete a grade")
def delete_grade(
    grade_id: str, identity: AdminIdentity, exam_manager: ExamManagerDep
) -> MessageResponse:
    exam_manager.delete_grade(grade_id)
    return MessageResponse(message="Grade deleted successfully")
