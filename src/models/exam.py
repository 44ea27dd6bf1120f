from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class ExamModel(Base):
    __tablename__ = "exams"

    exam_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    class_id = Column(String, ForeignKey("classes.class_id"), index=True, nullable=False)
    subject_id = Column(String, ForeignKey("subjects.subject_id"), index=True, nullable=False)
    date = Column(String, index=True, nullable=False)  # ISO format string
    max_marks = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    exam_type = Column(String, index=True, nullable=False)
    instructions = Column(Text, nullable=True)
    status = Column(String, index=True, nullable=False, default="SCHEDULED")
    created_by_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    school_class = relationship("ClassModel", foreign_keys=[class_id])
    subject = relationship("SubjectModel", foreign_keys=[subject_id])
    created_by = relationship("UserModel", foreign_keys=[created_by_id])
    grades = relationship(
        "GradeModel",
        back_populates="exam",
        cascade="all, delete-orphan",
    )
