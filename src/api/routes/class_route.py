"""Class management routes."""

from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import AdminIdentity, CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import ClassManagerDep
from schemas.class_schema import (
    AddStudentRequest,
    ClassInfo,
    ClassStatus,
    CreateClassRequest,
    UpdateClassRequest,
)
from schemas.common import MessageResponse, Page
from schemas.user import User

router = APIRouter(prefix=f"{API_PREFIX}/classes", tags=["Classes"])


@router.get("", response_model=Page[ClassInfo], summary="List classes")
def list_classes(
    identity: CurrentIdentity,
    class_manager: ClassManagerDep,
    params: PageParams,
    year: Optional[int] = None,
    status: Optional[ClassStatus] = None,
    search: Optional[str] = None,
) -> Page[ClassInfo]:
    return class_manager.list_classes(params, year=year, status=status, search=search)


@router.get("/{class_id}", response_model=ClassInfo, summary="Get a class")
def get_class(class_id: str, identity: CurrentIdentity, class_manager: ClassManagerDep) -> ClassInfo:
    return class_manager.get_class_info(class_id)


@router.get("/{class_id}/students", response_model=List[User], summary="List class students")
def list_class_students(
    class_id: str, identity: CurrentIdentity, class_manager: ClassManagerDep
) -> List[User]:
    return class_manager.list_students(class_id)


@router.post(
    "",
    response_model=ClassInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create a class",
)
def create_class(
    req: CreateClassRequest, identity: TeacherIdentity, class_manager: ClassManagerDep
) -> ClassInfo:
    class_model = class_manager.create_class(
        name=req.name,
        section=req.section,
        year=req.year,
        class_teacher_id=req.class_teacher_id,
        capacity=req.capacity,
        status=req.status,
    )
    return ClassInfo.model_validate(class_model)


@router.patch("/{class_id}", response_model=ClassInfo, summary="Update a class")
def update_class(
    class_id: str,
    req: UpdateClassRequest,
    identity: TeacherIdentity,
    class_manager: ClassManagerDep,
) -> ClassInfo:
    class_model = class_manager.update_class(
        class_id,
        name=req.name,
        section=req.section,
        year=req.year,
        class_teacher_id=req.class_teacher_id,
        capacity=req.capacity,
        status=req.status,
    )
    return ClassInfo.model_validate(class_model)


@router.delete("/{class_id}", response_model=MessageResponse, summary="Delete a class")
def delete_class(
    class_id: str, identity: AdminIdentity, class_manager: ClassManagerDep
) -> MessageResponse:
    class_manager.delete_class(class_id)
    return MessageResponse(message="Class deleted successfully")


@router.post("/{class_id}/students", response_model=ClassInfo, summary="Add a student")
def add_student(
    class_id: str,
    req: AddStudentRequest,
    identity: TeacherIdentity,
    class_manager: ClassManagerDep,
) -> ClassInfo:
    """Add a student to the class.

    Fails when the student is already a member or the class is full.
    """
    class_model = class_manager.add_student(class_id, req.student_id)
    return ClassInfo.model_validate(class_model)


@router.delete(
    "/{class_id}/students/{student_id}",
    response_model=ClassInfo,
    summary="Remove a student",
)
def remove_student(
    class_id: str,
    student_id: str,
    identity: TeacherIdentity,
    class_manager: ClassManagerDep,
) -> ClassInfo:
    class_model = class_manager.remove_student(class_id, student_id)
    return ClassInfo.model_validate(class_model)
