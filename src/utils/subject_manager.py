"""Subject management utilities."""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError
from models.base import generate_id
from models.subject import SubjectModel
from schemas.common import Page, PageQuery
from schemas.subject import SubjectInfo, SubjectStatus
from utils.integrity import commit_unique, require_class, require_teacher
from utils.pagination import paginate
from utils.timeutils import utc_now_iso

logger = logging.getLogger(__name__)

SUBJECT_SORT_FIELDS = ("created_at", "updated_at", "name", "code", "credits", "status")
DUPLICATE_SUBJECT_MESSAGE = "Subject with this code already exists in this class"


class SubjectManager:
    """Manages subjects taught in classes."""

    def __init__(self, db: Session):
        self.db = db

    def create_subject(
        self,
        name: str,
        code: str,
        class_id: str,
        teacher_id: str,
        description: Optional[str] = None,
        credits: Optional[int] = None,
        status: Optional[SubjectStatus] = None,
    ) -> SubjectModel:
        """Create a subject in a class.

        Raises:
            ConflictError: If the class already has a subject with this code.
            NotFoundError: If the class or teacher does not exist.
            BusinessRuleViolation: If the teacher is not a TEACHER.
        """
        code = code.strip().upper()
        self._ensure_unique(code, class_id)
        require_class(self.db, class_id)
        require_teacher(self.db, teacher_id)

        now = utc_now_iso()
        model = SubjectModel(
            subject_id=generate_id(),
            name=name.strip(),
            code=code,
            class_id=class_id,
            teacher_id=teacher_id,
            description=description,
            credits=credits or 1,
            status=(status or SubjectStatus.ACTIVE).value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        commit_unique(self.db, DUPLICATE_SUBJECT_MESSAGE)
        self.db.refresh(model)
        logger.info("Created subject %s (%s) in class %s", model.subject_id, code, class_id)
        return model

    def get_subject(self, subject_id: str) -> SubjectModel:
        model = self.db.get(SubjectModel, subject_id)
        if model is None:
            raise NotFoundError("Subject not found")
        return model

    def list_subjects(
        self,
        params: Optional[PageQuery] = None,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        status: Optional[SubjectStatus] = None,
        search: Optional[str] = None,
    ) -> Page[SubjectInfo]:
        query = self.db.query(SubjectModel)
        if class_id:
            query = query.filter(SubjectModel.class_id == class_id)
        if teacher_id:
            query = query.filter(SubjectModel.teacher_id == teacher_id)
        if status:
            query = query.filter(SubjectModel.status == status.value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(SubjectModel.name.ilike(pattern), SubjectModel.code.ilike(pattern))
            )
        items, pagination = paginate(query, SubjectModel, params, SUBJECT_SORT_FIELDS)
        return Page[SubjectInfo](
            items=[SubjectInfo.model_validate(m) for m in items], pagination=pagination
        )

    def update_subject(
        self,
        subject_id: str,
        name: Optional[str] = None,
        code: Optional[str] = None,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        description: Optional[str] = None,
        credits: Optional[int] = None,
        status: Optional[SubjectStatus] = None,
    ) -> SubjectModel:
        """Update a subject. None leaves a field unchanged.

        The (code, class) pair is re-checked when either part changes.
        """
        model = self.get_subject(subject_id)

        new_code = code.strip().upper() if code is not None else model.code
        new_class_id = class_id if class_id is not None else model.class_id
        if (new_code, new_class_id) != (model.code, model.class_id):
            self._ensure_unique(new_code, new_class_id, exclude_id=subject_id)
        if new_class_id != model.class_id:
            require_class(self.db, new_class_id)
        if teacher_id is not None and teacher_id != model.teacher_id:
            require_teacher(self.db, teacher_id)
            model.teacher_id = teacher_id

        model.code = new_code
        model.class_id = new_class_id
        if name is not None:
            model.name = name.strip()
        if description is not None:
            model.description = description
        if credits is not None:
            model.credits = credits
        if status is not None:
            model.status = status.value
        model.updated_at = utc_now_iso()

        commit_unique(self.db, DUPLICATE_SUBJECT_MESSAGE)
        self.db.refresh(model)
        logger.info("Updated subject %s", subject_id)
        return model

    def delete_subject(self, subject_id: str) -> None:
        model = self.get_subject(subject_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted subject %s", subject_id)

    def _ensure_unique(self, code: str, class_id: str, exclude_id: Optional[str] = None) -> None:
        query = self.db.query(SubjectModel).filter(
            SubjectModel.code == code, SubjectModel.class_id == class_id
        )
        if exclude_id:
            query = query.filter(SubjectModel.subject_id != exclude_id)
        if query.first() is not None:
            raise ConflictError(DUPLICATE_SUBJECT_MESSAGE)
