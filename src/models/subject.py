from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class SubjectModel(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("code", "class_id", name="uq_subjects_code_class"),
    )

    subject_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=False)  # always upper-case
    class_id = Column(String, ForeignKey("classes.class_id"), index=True, nullable=False)
    teacher_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    description = Column(String, nullable=True)
    credits = Column(Integer, nullable=False, default=1)
    status = Column(String, index=True, nullable=False, default="ACTIVE")
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    school_class = relationship("ClassModel")
    teacher = relationship("UserModel", foreign_keys=[teacher_id])
