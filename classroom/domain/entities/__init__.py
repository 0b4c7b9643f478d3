"""Domain entities exposed by the application."""

from .notification import (
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
    NOTIFICATION_TYPE_COURSE_ENROLLMENT,
    NOTIFICATION_TYPE_GRADE_ASSIGNED,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
    NOTIFICATION_TYPE_USER_REGISTRATION,
    NOTIFICATION_TYPES,
    PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    RELATED_TYPE_ASSIGNMENT,
    RELATED_TYPE_COURSE,
    RELATED_TYPE_SUBMISSION,
    RELATED_TYPE_USER,
    TITLE_MAX_LENGTH,
    Notification,
)
from .user import ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER, ROLES, User

__all__ = [
    "Notification",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_USER_REGISTRATION",
    "NOTIFICATION_TYPE_COURSE_ASSIGNMENT",
    "NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION",
    "NOTIFICATION_TYPE_GRADE_ASSIGNED",
    "NOTIFICATION_TYPE_COURSE_ENROLLMENT",
    "NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT",
    "PRIORITIES",
    "PRIORITY_NORMAL",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "RELATED_TYPE_COURSE",
    "RELATED_TYPE_ASSIGNMENT",
    "RELATED_TYPE_SUBMISSION",
    "RELATED_TYPE_USER",
    "TITLE_MAX_LENGTH",
    "User",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_TEACHER",
    "ROLE_STUDENT",
]
