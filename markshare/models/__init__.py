"""Database models package."""

from markshare.models.audit import AuditAction, AuditLog
from markshare.models.exam import Exam
from markshare.models.marks import CURRENT_SCHEMA_VERSION, MarksDocument
from markshare.models.school_class import SchoolClass
from markshare.models.student import Student
from markshare.models.subject import Subject
from markshare.models.user import User, UserRole

__all__ = [
    # User
    "User",
    "UserRole",
    # Reference data
    "SchoolClass",
    "Subject",
    "Exam",
    # Student
    "Student",
    # Marks
    "MarksDocument",
    "CURRENT_SCHEMA_VERSION",
    # Audit
    "AuditLog",
    "AuditAction",
]
