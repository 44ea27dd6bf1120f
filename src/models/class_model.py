from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base

class_students = Table(
    "class_students",
    Base.metadata,
    Column("class_id", String, ForeignKey("classes.class_id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", String, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
)


class ClassModel(Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("name", "section", "year", name="uq_classes_name_section_year"),
    )

    class_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    section = Column(String, nullable=False)
    year = Column(Integer, index=True, nullable=False)
    class_teacher_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    capacity = Column(Integer, nullable=False, default=30)
    status = Column(String, index=True, nullable=False, default="ACTIVE")
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    class_teacher = relationship("UserModel", foreign_keys=[class_teacher_id])
    students = relationship("UserModel", secondary=class_students)
    subjects = relationship("SubjectModel", viewonly=True)

    @property
    def display_name(self) -> str:
        return f"{self.name} - {self.section}"
