"""Announcement schema definitions."""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import UserRef


class Audience(str, Enum):
    ALL = "ALL"
    CLASS = "CLASS"
    ROLE = "ROLE"
    USER = "USER"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class AnnouncementStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class AnnouncementInfo(BaseModel):
    announcement_id: str
    title: str
    body: str
    audience: Audience
    targets: List[str] = Field(default_factory=list)
    target_model: Optional[str] = None
    created_by_id: str
    created_by: Optional[UserRef] = None
    priority: Priority
    status: AnnouncementStatus
    published_at: Optional[str] = None
    expires_at: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str


class CreateAnnouncementRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=2000)
    audience: Audience
    targets: List[str] = Field(default_factory=list)
    priority: Optional[Priority] = None
    status: Optional[AnnouncementStatus] = None
    expires_at: Optional[dt.datetime] = None
    attachments: List[str] = Field(default_factory=list)


class UpdateAnnouncementRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    body: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    audience: Optional[Audience] = None
    targets: Optional[List[str]] = None
    priority: Optional[Priority] = None
    status: Optional[AnnouncementStatus] = None
    expires_at: Optional[dt.datetime] = None
    attachments: Optional[List[str]] = None
