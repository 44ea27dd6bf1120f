"""Shared schema definitions.

Reference models are the compact shapes used when one entity is populated
inside another, plus pagination envelopes and simple message responses.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class UserRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    first_name: str
    last_name: str
    email: str


class ClassRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: str
    name: str
    section: str
    year: int


class SubjectRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_id: str
    name: str
    code: str


class ExamRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exam_id: str
    name: str
    date: str
    max_marks: int
    exam_type: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class Page(BaseModel, Generic[T]):
    """A page of results together with its pagination metadata."""

    items: List[T]
    pagination: Pagination


class PageQuery(BaseModel):
    """Pagination and sorting parameters accepted by list endpoints."""

    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    sort_by: Optional[str] = None
    sort_order: str = Field(default="desc", pattern="^(asc|desc)$")


class MessageResponse(BaseModel):
    success: bool = True
    message: str
