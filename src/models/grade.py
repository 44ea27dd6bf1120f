from sqlalchemy import Column, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class GradeModel(Base):
    __tablename__ = "grades"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_grades_exam_student"),
    )

    grade_id = Column(String, primary_key=True, index=True)
    exam_id = Column(
        String,
        ForeignKey("exams.exam_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    student_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    marks = Column(Float, nullable=False)
    grade = Column(String, index=True, nullable=False)  # letter, derived from marks
    remarks = Column(String, nullable=True)
    graded_by_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    graded_at = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    exam = relationship("ExamModel", back_populates="grades")
    student = relationship("UserModel", foreign_keys=[student_id])
    graded_by = relationship("UserModel", foreign_keys=[graded_by_id])
