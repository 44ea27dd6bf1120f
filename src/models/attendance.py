from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class AttendanceModel(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint(
            "date",
            "class_id",
            "student_id",
            name="uq_attendance_date_class_student",
        ),
    )

    attendance_id = Column(String, primary_key=True, index=True)
    date = Column(String, index=True, nullable=False)  # YYYY-MM-DD
    class_id = Column(String, ForeignKey("classes.class_id"), index=True, nullable=False)
    student_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    status = Column(String, index=True, nullable=False)  # PRESENT, ABSENT, LATE, EXCUSED
    marked_by_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    remarks = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    school_class = relationship("ClassModel", foreign_keys=[class_id])
    student = relationship("UserModel", foreign_keys=[student_id])
    marked_by = relationship("UserModel", foreign_keys=[marked_by_id])
