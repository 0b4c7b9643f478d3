"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

NOTIFICATION_TYPE_USER_REGISTRATION: Final[str] = "user_registration"
NOTIFICATION_TYPE_COURSE_ASSIGNMENT: Final[str] = "course_assignment"
NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION: Final[str] = "assignment_submission"
NOTIFICATION_TYPE_GRADE_ASSIGNED: Final[str] = "grade_assigned"
NOTIFICATION_TYPE_COURSE_ENROLLMENT: Final[str] = "course_enrollment"
NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT: Final[str] = "system_announcement"

NOTIFICATION_TYPES: Final[tuple[str, ...]] = (
    NOTIFICATION_TYPE_USER_REGISTRATION,
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
    NOTIFICATION_TYPE_GRADE_ASSIGNED,
    NOTIFICATION_TYPE_COURSE_ENROLLMENT,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
)

PRIORITY_NORMAL: Final[str] = "normal"
PRIORITY_HIGH: Final[str] = "high"
PRIORITY_URGENT: Final[str] = "urgent"

PRIORITIES: Final[tuple[str, ...]] = (PRIORITY_NORMAL, PRIORITY_HIGH, PRIORITY_URGENT)

TITLE_MAX_LENGTH: Final[int] = 200

RELATED_TYPE_COURSE: Final[str] = "course"
RELATED_TYPE_ASSIGNMENT: Final[str] = "assignment"
RELATED_TYPE_SUBMISSION: Final[str] = "submission"
RELATED_TYPE_USER: Final[str] = "user"


@dataclass
class Notification:
    """Message delivered to exactly one recipient.

    ``message`` holds the rendered text; it is never recomputed from ``type``
    once stored. ``read_at`` is only set while ``is_read`` is true and never
    changes after the first transition.
    """

    id: int | None
    type: str
    title: str
    message: str
    recipient_id: int
    sender_id: int | None = None
    related_type: str | None = None
    related_id: int | None = None
    priority: str = PRIORITY_NORMAL
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


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
    "TITLE_MAX_LENGTH",
    "RELATED_TYPE_USER",
]
