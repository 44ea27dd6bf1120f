"""Subject schema definitions."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import ClassRef, UserRef


class SubjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class SubjectInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_id: str
    name: str
    code: str
    class_id: str
    school_class: Optional[ClassRef] = None
    teacher_id: str
    teacher: Optional[UserRef] = None
    description: Optional[str] = None
    credits: int
    status: SubjectStatus
    created_at: str
    updated_at: str


class CreateSubjectRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=10)
    class_id: str = Field(..., min_length=1)
    teacher_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None, max_length=500)
    credits: Optional[int] = Field(default=None, ge=1, le=10)
    status: Optional[SubjectStatus] = None


class UpdateSubjectRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    code: Optional[str] = Field(default=None, min_length=1, max_length=10)
    class_id: Optional[str] = Field(default=None, min_length=1)
    teacher_id: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=500)
    credits: Optional[int] = Field(default=None, ge=1, le=10)
    status: Optional[SubjectStatus] = None
