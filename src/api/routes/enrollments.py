"""Enrollment routes."""

from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import EnrollmentManagerDep
from schemas.common import MessageResponse, Page
from schemas.enrollment import (
    AddSubjectRequest,
    CreateEnrollmentRequest,
    EnrollmentInfo,
    EnrollmentStatus,
    UpdateEnrollmentRequest,
)

router = APIRouter(prefix=f"{API_PREFIX}/enrollments", tags=["Enrollments"])


@router.get("", response_model=Page[EnrollmentInfo], summary="List enrollments")
def list_enrollments(
    identity: CurrentIdentity,
    enrollment_manager: EnrollmentManagerDep,
    params: PageParams,
    student_id: Optional[str] = None,
    class_id: Optional[str] = None,
    status: Optional[EnrollmentStatus] = None,
    academic_year: Optional[int] = None,
) -> Page[EnrollmentInfo]:
    return enrollment_manager.list_enrollments(
        params,
        student_id=student_id,
        class_id=class_id,
        status=status,
        academic_year=academic_year,
    )


@router.get(
    "/student/{student_id}",
    response_model=List[EnrollmentInfo],
    summary="List a student's enrollments",
)
def list_student_enrollments(
    student_id: str,
    identity: CurrentIdentity,
    enrollment_manager: EnrollmentManagerDep,
    academic_year: Optional[int] = None,
) -> List[EnrollmentInfo]:
    return enrollment_manager.list_student_enrollments(student_id, academic_year=academic_year)


@router.get(
    "/class/{class_id}",
    response_model=List[EnrollmentInfo],
    summary="List a class's enrollments",
)
def list_class_enrollments(
    class_id: str,
    identity: CurrentIdentity,
    enrollment_manager: EnrollmentManagerDep,
    academic_year: Optional[int] = None,
    status: Optional[EnrollmentStatus] = None,
) -> List[EnrollmentInfo]:
    return enrollment_manager.list_class_enrollments(
        class_id, academic_year=academic_year, status=status
    )


@router.get("/{enrollment_id}", response_model=EnrollmentInfo, summary="Get an enrollment")
def get_enrollment(
    enrollment_id: str, identity: CurrentIdentity, enrollment_manager: EnrollmentManagerDep
) -> EnrollmentInfo:
    return EnrollmentInfo.model_validate(enrollment_manager.get_enrollment(enrollment_id))


@router.post(
    "",
    response_model=EnrollmentInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll a student",
)
def create_enrollment(
    req: CreateEnrollmentRequest,
    identity: TeacherIdentity,
    enrollment_manager: EnrollmentManagerDep,
) -> EnrollmentInfo:
    model = enrollment_manager.create_enrollment(
        student_id=req.student_id,
        class_id=req.class_id,
        academic_year=req.academic_year,
        subject_ids=req.subject_ids,
        status=req.status,
    )
    return EnrollmentInfo.model_validate(model)


@router.patch("/{enrollment_id}", response_model=EnrollmentInfo, summary="Update an enrollment")
def update_enrollment(
    enrollment_id: str,
    req: UpdateEnrollmentRequest,
    identity: TeacherIdentity,
    enrollment_manager: EnrollmentManagerDep,
) -> EnrollmentInfo:
    model = enrollment_manager.update_enrollment(
        enrollment_id, subject_ids=req.subject_ids, status=req.status
    )
    return EnrollmentInfo.model_validate(model)


@router.delete(
    "/{enrollment_id}", response_model=MessageResponse, summary="Delete an enrollment"
)
def delete_enrollment(
    enrollment_id: str, identity: AdminIdentity, enrollment_manager: EnrollmentManagerDep
) -> MessageResponse:
    enrollment_manager.delete_enrollment(enrollment_id)
    return MessageResponse(message="Enrollment deleted successfully")


@router.post(
    "/{enrollment_id}/subjects",
    response_model=EnrollmentInfo,
    summary="Add a subject to an enrollment",
)
def add_subject(
    enrollment_id: str,
    req: AddSubjectRequest,
    identity: TeacherIdentity,
    enrollment_manager: EnrollmentManagerDep,
) -> EnrollmentInfo:
    model = enrollment_manager.add_subject(enrollment_id, req.subject_id)
    return EnrollmentInfo.model_validate(model)


@router.delete(
    "/{enrollment_id}/subjects/{subject_id}",
    response_model=EnrollmentInfo,
    summary="Remove a subject from an enrollment",
)
def remove_subject(
    enrollment_id: str,
    subject_id: str,
    identity: TeacherIdentity,
    enrollment_manager: EnrollmentManagerDep,
) -> EnrollmentInfo:
    model = enrollment_manager.remove_subject(enrollment_id, subject_id)
    return EnrollmentInfo.model_validate(model)
