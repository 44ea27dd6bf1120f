from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base

enrollment_subjects = Table(
    "enrollment_subjects",
    Base.metadata,
    Column(
        "enrollment_id",
        String,
        ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("subject_id", String, ForeignKey("subjects.subject_id", ondelete="CASCADE"), primary_key=True),
)


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "class_id",
            "academic_year",
            name="uq_enrollments_student_class_year",
        ),
    )

    enrollment_id = Column(String, primary_key=True, index=True)
    student_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    class_id = Column(String, ForeignKey("classes.class_id"), index=True, nullable=False)
    academic_year = Column(Integer, index=True, nullable=False)
    status = Column(String, index=True, nullable=False, default="ACTIVE")
    enrolled_at = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    student = relationship("UserModel", foreign_keys=[student_id])
    school_class = relationship("ClassModel", foreign_keys=[class_id])
    subjects = relationship("SubjectModel", secondary=enrollment_subjects)
