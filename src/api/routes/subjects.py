"""Subject management routes."""

from typing import Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import SubjectManagerDep
from schemas.common import MessageResponse, Page
from schemas.subject import (
    CreateSubjectRequest,
    SubjectInfo,
    SubjectStatus,
    UpdateSubjectRequest,
)

router = APIRouter(prefix=f"{API_PREFIX}/subjects", tags=["Subjects"])


@router.get("", response_model=Page[SubjectInfo], summary="List subjects")
def list_subjects(
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
    params: PageParams,
    class_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    status: Optional[SubjectStatus] = None,
    search: Optional[str] = None,
) -> Page[SubjectInfo]:
    return subject_manager.list_subjects(
        params, class_id=class_id, teacher_id=teacher_id, status=status, search=search
    )


@router.get("/{subject_id}", response_model=SubjectInfo, summary="Get a subject")
def get_subject(
    subject_id: str, identity: CurrentIdentity, subject_manager: SubjectManagerDep
) -> SubjectInfo:
    return SubjectInfo.model_validate(subject_manager.get_subject(subject_id))


@router.post(
    "",
    response_model=SubjectInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create a subject",
)
def create_subject(
    req: CreateSubjectRequest, identity: TeacherIdentity, subject_manager: SubjectManagerDep
) -> SubjectInfo:
    model = subject_manager.create_subject(
        name=req.name,
        code=req.code,
        class_id=req.class_id,
        teacher_id=req.teacher_id,
        description=req.description,
        credits=req.credits,
        status=req.status,
    )
    return SubjectInfo.model_validate(model)


@router.patch("/{subject_id}", response_model=SubjectInfo, summary="Update a subject")
def update_subject(
    subject_id: str,
    req: UpdateSubjectRequest,
    identity: TeacherIdentity,
    subject_manager: SubjectManagerDep,
) -> SubjectInfo:
    model = subject_manager.update_subject(
        subject_id,
        name=req.name,
        code=req.code,
        class_id=req.class_id,
        teacher_id=req.teacher_id,
        description=req.description,
        credits=req.credits,
        status=req.status,
    )
    return SubjectInfo.model_validate(model)


@router.delete("/{subject_id}", response_model=MessageResponse, summary="Delete a subject")
def delete_subject(
    subject_id: str, identity: AdminIdentity, subject_manager: SubjectManagerDep
) -> MessageResponse:
    subject_manager.delete_subject(subject_id)
    return MessageResponse(message="Subject deleted successfully")
