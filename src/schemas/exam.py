"""Exam and grade schema definitions."""

import datetime as dt
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import ClassRef, ExamRef, SubjectRef, UserRef


class ExamType(str, Enum):
    QUIZ = "QUIZ"
    MIDTERM = "MIDTERM"
    FINAL = "FINAL"
    ASSIGNMENT = "ASSIGNMENT"
    PROJECT = "PROJECT"


class ExamStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ExamInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exam_id: str
    name: str
    class_id: str
    school_class: Optional[ClassRef] = None
    subject_id: str
    subject: Optional[SubjectRef] = None
    date: str
    max_marks: int
    duration: int
    exam_type: ExamType
    instructions: Optional[str] = None
    status: ExamStatus
    created_by_id: str
    created_by: Optional[UserRef] = None
    created_at: str
    updated_at: str


class CreateExamRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    class_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    date: dt.datetime
    max_marks: int = Field(..., ge=1, le=1000)
    duration: int = Field(..., ge=15, le=480, description="Duration in minutes.")
    exam_type: ExamType
    instructions: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[ExamStatus] = None


class UpdateExamRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    date: Optional[dt.datetime] = None
    max_marks: Optional[int] = Field(default=None, ge=1, le=1000)
    duration: Optional[int] = Field(default=None, ge=15, le=480)
    exam_type: Optional[ExamType] = None
    instructions: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[ExamStatus] = None


class GradeInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    grade_id: str
    exam_id: str
    exam: Optional[ExamRef] = None
    student_id: str
    student: Optional[UserRef] = None
    marks: float
    grade: str
    remarks: Optional[str] = None
    graded_by_id: str
    graded_by: Optional[UserRef] = None
    graded_at: str
    created_at: str
    updated_at: str


class CreateGradeRequest(BaseModel):
    exam_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    marks: float = Field(..., ge=0)
    remarks: Optional[str] = Field(default=None, max_length=200)


class UpdateGradeRequest(BaseModel):
    marks: Optional[float] = Field(default=None, ge=0)
    remarks: Optional[str] = Field(default=None, max_length=200)


class GradeStatistics(BaseModel):
    total_students: int
    graded_students: int
    average_marks: float
    highest_marks: float
    lowest_marks: float
    grade_distribution: Dict[str, int]
