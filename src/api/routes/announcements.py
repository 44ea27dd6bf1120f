"""Announcement routes.

Anyone signed in can read the announcements addressed to them. Teachers and
admins write announcements; only the creator (or an admin) can change one.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, status

from api.params import PageParams
from api.routes.auth import CurrentIdentity, TeacherIdentity
from config import API_PREFIX
from core.dependencies import AnnouncementManagerDep
from schemas.announcement import (
    AnnouncementInfo,
    AnnouncementStatus,
    Audience,
    CreateAnnouncementRequest,
    Priority,
    UpdateAnnouncementRequest,
)
from schemas.common import MessageResponse, Page
from utils.announcement_manager import to_announcement_info

router = APIRouter(prefix=f"{API_PREFIX}/announcements", tags=["Announcements"])


@router.get("", response_model=Page[AnnouncementInfo], summary="List announcements")
def list_announcements(
    identity: CurrentIdentity,
    announcement_manager: AnnouncementManagerDep,
    params: PageParams,
    status: Optional[AnnouncementStatus] = None,
    created_by_id: Optional[str] = None,
    audience: Optional[Audience] = None,
    priority: Optional[Priority] = None,
    search: Optional[str] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> Page[AnnouncementInfo]:
    return announcement_manager.list_announcements(
        identity,
        params,
        status=status,
        created_by_id=created_by_id,
        audience=audience,
        priority=priority,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/my", response_model=Page[AnnouncementInfo], summary="List my announcements")
def list_my_announcements(
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
    params: PageParams,
    status: Optional[AnnouncementStatus] = None,
    priority: Optional[Priority] = None,
) -> Page[AnnouncementInfo]:
    return announcement_manager.list_my_announcements(
        identity.user_id, params, status=status, priority=priority
    )


@router.get("/feed", response_model=List[AnnouncementInfo], summary="Announcement feed")
def get_feed(
    identity: CurrentIdentity, announcement_manager: AnnouncementManagerDep
) -> List[AnnouncementInfo]:
    return announcement_manager.get_feed(identity)


@router.get("/{announcement_id}", response_model=AnnouncementInfo, summary="Get an announcement")
def get_announcement(
    announcement_id: str,
    identity: CurrentIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> AnnouncementInfo:
    model = announcement_manager.get_visible_announcement(announcement_id, identity)
    return to_announcement_info(model)


@router.post(
    "",
    response_model=AnnouncementInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create an announcement",
)
def create_announcement(
    req: CreateAnnouncementRequest,
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> AnnouncementInfo:
    model = announcement_manager.create_announcement(
        title=req.title,
        body=req.body,
        audience=req.audience,
        created_by_id=identity.user_id,
        targets=req.targets,
        priority=req.priority,
        status=req.status,
        expires_at=req.expires_at,
        attachments=req.attachments,
    )
    return to_announcement_info(model)


@router.patch(
    "/{announcement_id}", response_model=AnnouncementInfo, summary="Update an announcement"
)
def update_announcement(
    announcement_id: str,
    req: UpdateAnnouncementRequest,
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> AnnouncementInfo:
    model = announcement_manager.update_announcement(
        announcement_id,
        identity,
        title=req.title,
        body=req.body,
        audience=req.audience,
        targets=req.targets,
        priority=req.priority,
        status=req.status,
        expires_at=req.expires_at,
        attachments=req.attachments,
    )
    return to_announcement_info(model)


@router.delete(
    "/{announcement_id}", response_model=MessageResponse, summary="Delete an announcement"
)
def delete_announcement(
    announcement_id: str,
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> MessageResponse:
    announcement_manager.delete_announcement(announcement_id, identity)
    return MessageResponse(message="Announcement deleted successfully")


@router.post(
    "/{announcement_id}/publish",
    response_model=AnnouncementInfo,
    summary="Publish an announcement",
)
def publish_announcement(
    announcement_id: str,
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> AnnouncementInfo:
    model = announcement_manager.publish_announcement(announcement_id, identity)
    return to_announcement_info(model)


@router.post(
    "/{announcement_id}/archive",
    response_model=AnnouncementInfo,
    summary="Archive an announcement",
)
def archive_announcement(
    announcement_id: str,
    identity: TeacherIdentity,
    announcement_manager: AnnouncementManagerDep,
) -> AnnouncementInfo:
    model = announcement_manager.archive_announcement(announcement_id, identity)
    return to_announcement_info(model)
