"""Enrollment schema definitions."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import ClassRef, SubjectRef, UserRef


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"


class EnrollmentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: str
    student_id: str
    student: Optional[UserRef] = None
    class_id: str
    school_class: Optional[ClassRef] = None
    subjects: List[SubjectRef] = Field(default_factory=list)
    academic_year: int
    status: EnrollmentStatus
    enrolled_at: str
    created_at: str
    updated_at: str


class CreateEnrollmentRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    class_id: str = Field(..., min_length=1)
    subject_ids: List[str] = Field(default_factory=list)
    academic_year: int = Field(..., ge=2020, le=2030)
    status: Optional[EnrollmentStatus] = None


class UpdateEnrollmentRequest(BaseModel):
    subject_ids: Optional[List[str]] = None
    status: Optional[EnrollmentStatus] = None


class AddSubjectRequest(BaseModel):
    subject_id: str = Field(..., min_length=1)
