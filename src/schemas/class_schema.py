"""Class schema definitions."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import SubjectRef, UserRef


class ClassStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ClassInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: str
    name: str
    section: str
    year: int
    display_name: str
    capacity: int
    status: ClassStatus
    class_teacher_id: str
    class_teacher: Optional[UserRef] = None
    students: List[UserRef] = Field(default_factory=list)
    subjects: List[SubjectRef] = Field(default_factory=list)
    created_at: str
    updated_at: str


class CreateClassRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)
    section: str = Field(..., min_length=1, max_length=10)
    year: int = Field(..., ge=2020, le=2030)
    class_teacher_id: str = Field(..., min_length=1)
    capacity: Optional[int] = Field(default=None, ge=1, le=100)
    status: Optional[ClassStatus] = None


class UpdateClassRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    section: Optional[str] = Field(default=None, min_length=1, max_length=10)
    year: Optional[int] = Field(default=None, ge=2020, le=2030)
    class_teacher_id: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, ge=1, le=100)
    status: Optional[ClassStatus] = None


class AddStudentRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
