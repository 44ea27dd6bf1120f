"""Database models.

Importing this package registers every table with Base.metadata.
"""

from .base import Base, generate_id
from .user import UserModel, parent_links
from .class_model import ClassModel, class_students
from .subject import SubjectModel
from .enrollment import EnrollmentModel, enrollment_subjects
from .attendance import AttendanceModel
from .exam import ExamModel
from .grade import GradeModel
from .announcement import AnnouncementModel, AnnouncementTargetModel

__all__ = [
    "Base",
    "generate_id",
    "UserModel",
    "parent_links",
    "ClassModel",
    "class_students",
    "SubjectModel",
    "EnrollmentModel",
    "enrollment_subjects",
    "AttendanceModel",
    "ExamModel",
    "GradeModel",
    "AnnouncementModel",
    "AnnouncementTargetModel",
]
