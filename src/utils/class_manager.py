"""Class management utilities."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import DEFAULT_CLASS_CAPACITY
from core.exceptions import BusinessRuleViolation, ConflictError
from models.base import generate_id
from models.class_model import ClassModel, class_students
from models.user import UserModel
from schemas.class_schema import ClassInfo, ClassStatus
from schemas.common import Page, PageQuery
from schemas.user import User
from utils.integrity import (
    commit_unique,
    ensure_class_has_room,
    require_class,
    require_student,
    require_teacher,
)
from utils.pagination import paginate
from utils.timeutils import utc_now_iso

logger = logging.getLogger(__name__)

CLASS_SORT_FIELDS = ("created_at", "updated_at", "name", "section", "year", "capacity", "status")
DUPLICATE_CLASS_MESSAGE = "Class with this name, section, and year already exists"


class ClassManager:
    """Manages classes and their student membership."""

    def __init__(self, db: Session):
        self.db = db

    def create_class(
        self,
        name: str,
        section: str,
        year: int,
        class_teacher_id: str,
        capacity: Optional[int] = None,
        status: Optional[ClassStatus] = None,
    ) -> ClassModel:
        """Create a class.

        Raises:
            ConflictError: If a class with the same name, section and year
                exists.
            NotFoundError: If the class teacher does not exist.
            BusinessRuleViolation: If the class teacher is not a TEACHER.
        """
        name, section = name.strip(), section.strip()
        self._ensure_unique(name, section, year)
        require_teacher(self.db, class_teacher_id, label="Class teacher")

        now = utc_now_iso()
        class_model = ClassModel(
            class_id=generate_id(),
            name=name,
            section=section,
            year=year,
            class_teacher_id=class_teacher_id,
            capacity=capacity or DEFAULT_CLASS_CAPACITY,
            status=(status or ClassStatus.ACTIVE).value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(class_model)
        commit_unique(self.db, DUPLICATE_CLASS_MESSAGE)
        self.db.refresh(class_model)
        logger.info("Created class %s (%s)", class_model.class_id, class_model.display_name)
        return class_model

    def get_class(self, class_id: str) -> ClassModel:
        return require_class(self.db, class_id)

    def get_class_info(self, class_id: str) -> ClassInfo:
        return ClassInfo.model_validate(self.get_class(class_id))

    def list_classes(
        self,
        params: Optional[PageQuery] = None,
        year: Optional[int] = None,
        status: Optional[ClassStatus] = None,
        search: Optional[str] = None,
    ) -> Page[ClassInfo]:
        query = self.db.query(ClassModel)
        if year is not None:
            query = query.filter(ClassModel.year == year)
        if status:
            query = query.filter(ClassModel.status == status.value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(ClassModel.name.ilike(pattern), ClassModel.section.ilike(pattern))
            )
        items, pagination = paginate(query, ClassModel, params, CLASS_SORT_FIELDS)
        return Page[ClassInfo](
            items=[ClassInfo.model_validate(m) for m in items], pagination=pagination
        )

    def update_class(
        self,
        class_id: str,
        name: Optional[str] = None,
        section: Optional[str] = None,
        year: Optional[int] = None,
        class_teacher_id: Optional[str] = None,
        capacity: Optional[int] = None,
        status: Optional[ClassStatus] = None,
    ) -> ClassModel:
        """Update a class. None leaves a field unchanged.

        Raises:
            NotFoundError: If the class or the new teacher does not exist.
            ConflictError: If the new name/section/year clashes with another
                class.
            BusinessRuleViolation: If the new teacher is not a TEACHER or the
                capacity would drop below the number of students.
        """
        class_model = self.get_class(class_id)

        new_name = name.strip() if name is not None else class_model.name
        new_section = section.strip() if section is not None else class_model.section
        new_year = year if year is not None else class_model.year
        if (new_name, new_section, new_year) != (
            class_model.name,
            class_model.section,
            class_model.year,
        ):
            self._ensure_unique(new_name, new_section, new_year, exclude_id=class_id)

        teacher_changed = (
            class_teacher_id is not None and class_teacher_id != class_model.class_teacher_id
        )
        if teacher_changed:
            require_teacher(self.db, class_teacher_id, label="Class teacher")

        if capacity is not None and capacity < len(class_model.students):
            raise BusinessRuleViolation(
                "Capacity cannot be lower than the number of enrolled students"
            )

        # Nothing is assigned until every check has passed
        if teacher_changed:
            class_model.class_teacher_id = class_teacher_id
        if capacity is not None:
            class_model.capacity = capacity
        class_model.name = new_name
        class_model.section = new_section
        class_model.year = new_year
        if status is not None:
            class_model.status = status.value
        class_model.updated_at = utc_now_iso()

        commit_unique(self.db, DUPLICATE_CLASS_MESSAGE)
        self.db.refresh(class_model)
        logger.info("Updated class %s", class_id)
        return class_model

    def delete_class(self, class_id: str) -> None:
        """Delete a class that has no students.

        Raises:
            NotFoundError: If the class does not exist.
            BusinessRuleViolation: If students are still enrolled.
        """
        class_model = self.get_class(class_id)
        if class_model.students:
            raise BusinessRuleViolation("Cannot delete class with enrolled students")
        self.db.delete(class_model)
        self.db.commit()
        logger.info("Deleted class %s", class_id)

    def add_student(self, class_id: str, student_id: str) -> ClassModel:
        """Add a student to a class and make it the student's current class.

        Raises:
            NotFoundError: If the class or student does not exist.
            BusinessRuleViolation: If the user is not a STUDENT or the class
                is full.
            AlreadyEnrolledError: If the student is already a member.
        """
        class_model = self.get_class(class_id)
        student = require_student(self.db, student_id)
        ensure_class_has_room(class_model, student)

        class_model.students.append(student)
        student.class_id = class_model.class_id
        now = utc_now_iso()
        student.updated_at = now
        class_model.updated_at = now
        self.db.commit()
        self.db.refresh(class_model)
        logger.info("Added student %s to class %s", student_id, class_id)
        return class_model

    def remove_student(self, class_id: str, student_id: str) -> ClassModel:
        """Remove a student from a class.

        Removing a student who is not a member leaves the class unchanged.

        Raises:
            NotFoundError: If the class does not exist.
        """
        class_model = self.get_class(class_id)
        student = next((s for s in class_model.students if s.user_id == student_id), None)
        if student is not None:
            class_model.students.remove(student)
            if student.class_id == class_id:
                student.class_id = None
            class_model.updated_at = utc_now_iso()
            self.db.commit()
            self.db.refresh(class_model)
            logger.info("Removed student %s from class %s", student_id, class_id)
        return class_model

    def list_students(self, class_id: str) -> List[User]:
        class_model = self.get_class(class_id)
        students = sorted(class_model.students, key=lambda s: (s.last_name, s.first_name))
        return [User.model_validate(s) for s in students]

    def _ensure_unique(
        self, name: str, section: str, year: int, exclude_id: Optional[str] = None
    ) -> None:
        query = self.db.query(ClassModel).filter(
            ClassModel.name == name,
            ClassModel.section == section,
            ClassModel.year == year,
        )
        if exclude_id:
            query = query.filter(ClassModel.class_id != exclude_id)
        if query.first() is not None:
            raise ConflictError(DUPLICATE_CLASS_MESSAGE)


def class_ids_for_user(db: Session, user: UserModel) -> List[str]:
    """Ids of the classes ``user`` belongs to as a student."""
    rows = (
        db.query(class_students.c.class_id)
        .filter(class_students.c.student_id == user.user_id)
        .all()
    )
    ids = [row[0] for row in rows]
    if user.class_id and user.class_id not in ids:
        ids.append(user.class_id)
    return ids
