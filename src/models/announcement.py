"""Announcement database models.

Targets are polymorphic (class ids or user ids depending on the audience), so
they live in their own table without a foreign key.
"""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class AnnouncementModel(Base):
    __tablename__ = "announcements"

    announcement_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    audience = Column(String, index=True, nullable=False)  # ALL, CLASS, ROLE, USER
    target_model = Column(String, nullable=True)  # 'User' or 'Class'; None for ALL
    created_by_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    priority = Column(String, index=True, nullable=False, default="MEDIUM")
    status = Column(String, index=True, nullable=False, default="DRAFT")
    published_at = Column(String, index=True, nullable=True)
    expires_at = Column(String, index=True, nullable=True)
    attachments = Column(JSON, default=list)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    created_by = relationship("UserModel", foreign_keys=[created_by_id])
    targets = relationship(
        "AnnouncementTargetModel",
        back_populates="announcement",
        cascade="all, delete-orphan",
        order_by="AnnouncementTargetModel.id",
    )

    @property
    def target_ids(self):
        return [t.target_id for t in self.targets]


class AnnouncementTargetModel(Base):
    __tablename__ = "announcement_targets"
    __table_args__ = (
        UniqueConstraint(
            "announcement_id",
            "target_id",
            name="uq_announcement_targets_announcement_target",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        String,
        ForeignKey("announcements.announcement_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    target_id = Column(String, index=True, nullable=False)

    announcement = relationship("AnnouncementModel", back_populates="targets")
