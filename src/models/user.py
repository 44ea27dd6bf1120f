"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import relationship

from .base import Base

# parent_id is the parent, child_id the student
parent_links = Table(
    "parent_links",
    Base.metadata,
    Column("parent_id", String, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
    Column("child_id", String, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
)


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)  # lower-cased
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(String, index=True, nullable=False)  # 'ADMIN', 'TEACHER', 'STUDENT', 'PARENT'
    status = Column(String, index=True, nullable=False, default="ACTIVE")
    # No FK: classes already reference users and SQLite cannot create the cycle
    class_id = Column(String, index=True, nullable=True)
    reset_password_token = Column(String, index=True, nullable=True)  # sha256 digest
    reset_password_expires = Column(String, nullable=True)  # ISO format string
    last_login = Column(String, nullable=True)  # ISO format string
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)  # ISO format string

    school_class = relationship(
        "ClassModel",
        primaryjoin="foreign(UserModel.class_id) == ClassModel.class_id",
        viewonly=True,
    )
    children = relationship(
        "UserModel",
        secondary=parent_links,
        primaryjoin=user_id == parent_links.c.parent_id,
        secondaryjoin=user_id == parent_links.c.child_id,
        back_populates="parents",
    )
    parents = relationship(
        "UserModel",
        secondary=parent_links,
        primaryjoin=user_id == parent_links.c.child_id,
        secondaryjoin=user_id == parent_links.c.parent_id,
        back_populates="children",
    )
    subjects = relationship(
        "SubjectModel", foreign_keys="SubjectModel.teacher_id", viewonly=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
