"""Announcement management utilities.

Announcements are addressed to everyone, to classes, or to individual users.
Non-admin readers only see published, unexpired announcements addressed to
them; the creator of an announcement (or an ADMIN) manages it.
"""

import datetime as dt
import logging
from typing import List, Optional

from sqlalchemy import and_, case, or_
from sqlalchemy.orm import Query, Session

from core.exceptions import NotFoundError
from core.permissions import ensure_owner_or_admin
from models.announcement import AnnouncementModel, AnnouncementTargetModel
from models.base import generate_id
from models.user import UserModel
from schemas.announcement import (
    AnnouncementInfo,
    AnnouncementStatus,
    Audience,
    Priority,
)
from schemas.common import Page, PageQuery, UserRef
from schemas.user import Role, TokenIdentity
from utils.class_manager import class_ids_for_user
from utils.integrity import require_user, validate_announcement_targets
from utils.pagination import paginate
from utils.timeutils import to_utc_iso, utc_now_iso

logger = logging.getLogger(__name__)

ANNOUNCEMENT_SORT_FIELDS = (
    "created_at",
    "updated_at",
    "published_at",
    "expires_at",
    "title",
    "priority",
    "status",
)
FEED_SIZE = 10
PRIORITY_RANK = {
    Priority.LOW.value: 1,
    Priority.MEDIUM.value: 2,
    Priority.HIGH.value: 3,
    Priority.URGENT.value: 4,
}


def to_announcement_info(model: AnnouncementModel) -> AnnouncementInfo:
    """Serialise an announcement with its target ids and populated creator."""
    return AnnouncementInfo(
        announcement_id=model.announcement_id,
        title=model.title,
        body=model.body,
        audience=model.audience,
        targets=model.target_ids,
        target_model=model.target_model,
        created_by_id=model.created_by_id,
        created_by=UserRef.model_validate(model.created_by) if model.created_by else None,
        priority=model.priority,
        status=model.status,
        published_at=model.published_at,
        expires_at=model.expires_at,
        attachments=list(model.attachments or []),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _not_expired():
    return or_(AnnouncementModel.expires_at.is_(None), AnnouncementModel.expires_at > utc_now_iso())


def _targets_any(ids: List[str]):
    return AnnouncementModel.targets.any(AnnouncementTargetModel.target_id.in_(ids))


class AnnouncementManager:
    """Manages announcements and who may read them."""

    def __init__(self, db: Session):
        self.db = db

    def create_announcement(
        self,
        title: str,
        body: str,
        audience: Audience,
        created_by_id: str,
        targets: Optional[List[str]] = None,
        priority: Optional[Priority] = None,
        status: Optional[AnnouncementStatus] = None,
        expires_at: Optional[dt.datetime] = None,
        attachments: Optional[List[str]] = None,
    ) -> AnnouncementModel:
        """Create an announcement.

        Raises:
            NotFoundError: If the creator does not exist.
            ValidationError: If targets are missing for a non-ALL audience or
                do not resolve.
        """
        require_user(self.db, created_by_id)
        audience = Audience(audience)
        target_model = validate_announcement_targets(self.db, audience, targets)

        now = utc_now_iso()
        model = AnnouncementModel(
            announcement_id=generate_id(),
            title=title.strip(),
            body=body,
            audience=audience.value,
            target_model=target_model,
            created_by_id=created_by_id,
            priority=(priority or Priority.MEDIUM).value,
            status=(status or AnnouncementStatus.DRAFT).value,
            expires_at=to_utc_iso(expires_at) if expires_at else None,
            attachments=list(attachments or []),
            created_at=now,
            updated_at=now,
        )
        model.targets = self._build_targets(targets if audience != Audience.ALL else [])
        self._stamp_published(model)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created announcement %s (%s)", model.announcement_id, model.audience)
        return model

    def get_announcement(self, announcement_id: str) -> AnnouncementModel:
        model = self.db.get(AnnouncementModel, announcement_id)
        if model is None:
            raise NotFoundError("Announcement not found")
        return model

    def get_visible_announcement(
        self, announcement_id: str, identity: TokenIdentity
    ) -> AnnouncementModel:
        """Fetch an announcement the caller may read.

        Announcements hidden from the caller are reported as not found.
        """
        if identity.role == Role.ADMIN:
            return self.get_announcement(announcement_id)
        model = (
            self._visible_query(identity)
            .filter(AnnouncementModel.announcement_id == announcement_id)
            .first()
        )
        if model is None:
            raise NotFoundError("Announcement not found")
        return model

    def list_announcements(
        self,
        identity: TokenIdentity,
        params: Optional[PageQuery] = None,
        status: Optional[AnnouncementStatus] = None,
        created_by_id: Optional[str] = None,
        audience: Optional[Audience] = None,
        priority: Optional[Priority] = None,
        search: Optional[str] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> Page[AnnouncementInfo]:
        """List unexpired announcements visible to ``identity``.

        Status and creator filters only apply to ADMIN callers; everyone else
        sees published announcements addressed to them.
        """
        if identity.role == Role.ADMIN:
            query = self.db.query(AnnouncementModel).filter(_not_expired())
            if status:
                query = query.filter(AnnouncementModel.status == status.value)
            if created_by_id:
                query = query.filter(AnnouncementModel.created_by_id == created_by_id)
        else:
            query = self._visible_query(identity)

        if audience:
            query = query.filter(AnnouncementModel.audience == audience.value)
        if priority:
            query = query.filter(AnnouncementModel.priority == priority.value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(AnnouncementModel.title.ilike(pattern), AnnouncementModel.body.ilike(pattern))
            )
        if start_date:
            query = query.filter(
                AnnouncementModel.published_at >= to_utc_iso(dt.datetime.combine(start_date, dt.time.min))
            )
        if end_date:
            query = query.filter(
                AnnouncementModel.published_at <= to_utc_iso(dt.datetime.combine(end_date, dt.time.max))
            )

        items, pagination = paginate(query, AnnouncementModel, params, ANNOUNCEMENT_SORT_FIELDS)
        return Page[AnnouncementInfo](
            items=[to_announcement_info(m) for m in items], pagination=pagination
        )

    def list_my_announcements(
        self,
        user_id: str,
        params: Optional[PageQuery] = None,
        status: Optional[AnnouncementStatus] = None,
        priority: Optional[Priority] = None,
    ) -> Page[AnnouncementInfo]:
        query = self.db.query(AnnouncementModel).filter(
            AnnouncementModel.created_by_id == user_id
        )
        if status:
            query = query.filter(AnnouncementModel.status == status.value)
        if priority:
            query = query.filter(AnnouncementModel.priority == priority.value)
        items, pagination = paginate(query, AnnouncementModel, params, ANNOUNCEMENT_SORT_FIELDS)
        return Page[AnnouncementInfo](
            items=[to_announcement_info(m) for m in items], pagination=pagination
        )

    def get_feed(self, identity: TokenIdentity) -> List[AnnouncementInfo]:
        """The latest announcements addressed to the caller, most urgent first."""
        rank = case(PRIORITY_RANK, value=AnnouncementModel.priority, else_=0)
        models = (
            self._visible_query(identity)
            .order_by(rank.desc(), AnnouncementModel.published_at.desc())
            .limit(FEED_SIZE)
            .all()
        )
        return [to_announcement_info(m) for m in models]

    def update_announcement(
        self,
        announcement_id: str,
        identity: TokenIdentity,
        title: Optional[str] = None,
        body: Optional[str] = None,
        audience: Optional[Audience] = None,
        targets: Optional[List[str]] = None,
        priority: Optional[Priority] = None,
        status: Optional[AnnouncementStatus] = None,
        expires_at: Optional[dt.datetime] = None,
        attachments: Optional[List[str]] = None,
    ) -> AnnouncementModel:
        """Update an announcement owned by the caller.

        Targets are re-validated whenever the audience or targets change.

        Raises:
            NotFoundError: If the announcement does not exist.
            ForbiddenError: If the caller is neither the creator nor ADMIN.
            ValidationError: If the resulting targets are invalid.
        """
        model = self.get_announcement(announcement_id)
        ensure_owner_or_admin(
            identity, model.created_by_id, "You can only update your own announcements"
        )

        if audience is not None or targets is not None:
            new_audience = Audience(audience or model.audience)
            new_targets = targets if targets is not None else model.target_ids
            model.target_model = validate_announcement_targets(self.db, new_audience, new_targets)
            model.audience = new_audience.value
            if new_audience == Audience.ALL:
                new_targets = []
            if new_targets != model.target_ids:
                model.targets = self._build_targets(new_targets, existing=model.targets)

        if title is not None:
            model.title = title.strip()
        if body is not None:
            model.body = body
        if priority is not None:
            model.priority = priority.value
        if status is not None:
            model.status = status.value
        if expires_at is not None:
            model.expires_at = to_utc_iso(expires_at)
        if attachments is not None:
            model.attachments = list(attachments)
        self._stamp_published(model)
        model.updated_at = utc_now_iso()

        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated announcement %s", announcement_id)
        return model

    def delete_announcement(self, announcement_id: str, identity: TokenIdentity) -> None:
        model = self.get_announcement(announcement_id)
        ensure_owner_or_admin(
            identity, model.created_by_id, "You can only delete your own announcements"
        )
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted announcement %s", announcement_id)

    def publish_announcement(
        self, announcement_id: str, identity: TokenIdentity
    ) -> AnnouncementModel:
        """Publish an announcement. published_at keeps its first value."""
        model = self.get_announcement(announcement_id)
        ensure_owner_or_admin(
            identity, model.created_by_id, "You can only publish your own announcements"
        )
        model.status = AnnouncementStatus.PUBLISHED.value
        self._stamp_published(model)
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Published announcement %s", announcement_id)
        return model

    def archive_announcement(
        self, announcement_id: str, identity: TokenIdentity
    ) -> AnnouncementModel:
        model = self.get_announcement(announcement_id)
        ensure_owner_or_admin(
            identity, model.created_by_id, "You can only archive your own announcements"
        )
        model.status = AnnouncementStatus.ARCHIVED.value
        model.updated_at = utc_now_iso()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Archived announcement %s", announcement_id)
        return model

    def _visible_query(self, identity: TokenIdentity) -> Query:
        """Published, unexpired announcements addressed to ``identity``."""
        addressed = [
            AnnouncementModel.audience == Audience.ALL.value,
            and_(
                AnnouncementModel.audience.in_([Audience.ROLE.value, Audience.USER.value]),
                _targets_any([identity.user_id]),
            ),
        ]
        user = self.db.get(UserModel, identity.user_id)
        class_ids = class_ids_for_user(self.db, user) if user is not None else []
        if class_ids:
            addressed.append(
                and_(AnnouncementModel.audience == Audience.CLASS.value, _targets_any(class_ids))
            )
        return self.db.query(AnnouncementModel).filter(
            AnnouncementModel.status == AnnouncementStatus.PUBLISHED.value,
            _not_expired(),
            or_(*addressed),
        )

    @staticmethod
    def _build_targets(
        target_ids: Optional[List[str]],
        existing: Optional[List[AnnouncementTargetModel]] = None,
    ) -> List[AnnouncementTargetModel]:
        # Kept rows are reused; re-inserting a kept target id would hit the
        # unique constraint before the old row is deleted.
        kept = {t.target_id: t for t in existing or []}
        return [
            kept.get(target_id) or AnnouncementTargetModel(target_id=target_id)
            for target_id in dict.fromkeys(target_ids or [])
        ]

    @staticmethod
    def _stamp_published(model: AnnouncementModel) -> None:
        if model.status == AnnouncementStatus.PUBLISHED.value and not model.published_at:
            model.published_at = utc_now_iso()
