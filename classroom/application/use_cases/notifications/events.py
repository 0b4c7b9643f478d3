"""Domain event handlers that emit notifications.

Handlers are called after the triggering write has succeeded. Delivery is
best-effort: every handler returns the notifications that were stored and
never raises because of a failed insert.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classroom.domain.entities import (
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
    NOTIFICATION_TYPE_COURSE_ENROLLMENT,
    NOTIFICATION_TYPE_GRADE_ASSIGNED,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
    NOTIFICATION_TYPE_USER_REGISTRATION,
    RELATED_TYPE_ASSIGNMENT,
    RELATED_TYPE_COURSE,
    RELATED_TYPE_SUBMISSION,
    RELATED_TYPE_USER,
    ROLE_ADMIN,
    ROLE_TEACHER,
    Notification,
    User,
)
from classroom.infrastructure.repositories import UserRepository

from .producer import Delivery, NotificationProducer
from .templates import AUDIENCE_ADMIN, AUDIENCE_TEACHER

logger = logging.getLogger(__name__)

_ROLE_LABELS = {ROLE_ADMIN: "管理员", ROLE_TEACHER: "教师"}


def _unique_recipients(candidates: Iterable[int | None]) -> list[int]:
    unique: list[int] = []
    for candidate in candidates:
        if isinstance(candidate, int) and candidate > 0 and candidate not in unique:
            unique.append(candidate)
    return unique


def notify_user_registered(session: Session, *, user: User) -> list[Notification]:
    """Welcome ``user`` and tell every active administrator about the signup."""

    data = {
        "fullName": user.full_name,
        "username": user.username,
        "roleLabel": _ROLE_LABELS.get(user.role, "学生"),
    }
    deliveries = [
        Delivery(
            type=NOTIFICATION_TYPE_USER_REGISTRATION,
            recipient_id=user.id,
            template_data=data,
            related_type=RELATED_TYPE_USER,
            related_id=user.id,
        )
    ]
    try:
        admin_ids = UserRepository(session).list_active_ids_by_role(ROLE_ADMIN)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not resolve administrators for registration of user %s", user.id)
        admin_ids = []
    for admin_id in _unique_recipients(admin_ids):
        if admin_id == user.id:
            continue
        deliveries.append(
            Delivery(
                type=NOTIFICATION_TYPE_USER_REGISTRATION,
                recipient_id=admin_id,
                template_data=data,
                audience=AUDIENCE_ADMIN,
                sender_id=user.id,
                related_type=RELATED_TYPE_USER,
                related_id=user.id,
            )
        )
    return NotificationProducer(session).fan_out(deliveries)


def notify_course_enrollment(
    session: Session,
    *,
    course_id: int,
    course_name: str,
    student_id: int,
    student_name: str,
    teacher_id: int | None,
) -> list[Notification]:
    """Confirm the enrollment to the student and inform the course teacher."""

    data = {"studentName": student_name, "courseName": course_name}
    deliveries = [
        Delivery(
            type=NOTIFICATION_TYPE_COURSE_ENROLLMENT,
            recipient_id=student_id,
            template_data=data,
            sender_id=teacher_id,
            related_type=RELATED_TYPE_COURSE,
            related_id=course_id,
        )
    ]
    if teacher_id and teacher_id != student_id:
        deliveries.append(
            Delivery(
                type=NOTIFICATION_TYPE_COURSE_ENROLLMENT,
                recipient_id=teacher_id,
                template_data=data,
                audience=AUDIENCE_TEACHER,
                sender_id=student_id,
                related_type=RELATED_TYPE_COURSE,
                related_id=course_id,
            )
        )
    return NotificationProducer(session).fan_out(deliveries)


def notify_assignment_published(
    session: Session,
    *,
    assignment_id: int,
    assignment_title: str,
    course_name: str,
    teacher_id: int | None,
    student_ids: Iterable[int],
) -> list[Notification]:
    """Tell every enrolled student that a new assignment is available."""

    data = {"assignmentTitle": assignment_title, "courseName": course_name}
    deliveries = [
        Delivery(
            type=NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
            recipient_id=student_id,
            template_data=data,
            sender_id=teacher_id,
            related_type=RELATED_TYPE_ASSIGNMENT,
            related_id=assignment_id,
        )
        for student_id in _unique_recipients(student_ids)
    ]
    return NotificationProducer(session).fan_out(deliveries)


def notify_assignment_submitted(
    session: Session,
    *,
    assignment_id: int,
    assignment_title: str,
    student_id: int,
    student_name: str,
    teacher_id: int | None,
) -> list[Notification]:
    """Inform the assignment's teacher about a new submission."""

    if not teacher_id:
        return []
    delivery = Delivery(
        type=NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
        recipient_id=teacher_id,
        template_data={"studentName": student_name, "assignmentTitle": assignment_title},
        sender_id=student_id,
        related_type=RELATED_TYPE_ASSIGNMENT,
        related_id=assignment_id,
    )
    return NotificationProducer(session).fan_out([delivery])


def notify_grade_assigned(
    session: Session,
    *,
    submission_id: int,
    assignment_title: str,
    score: float,
    student_id: int,
    grader_id: int | None = None,
) -> list[Notification]:
    """Tell the student that their submission has been graded."""

    formatted_score = f"{score:g}" if isinstance(score, (int, float)) else score
    delivery = Delivery(
        type=NOTIFICATION_TYPE_GRADE_ASSIGNED,
        recipient_id=student_id,
        template_data={"assignmentTitle": assignment_title, "score": formatted_score},
        sender_id=grader_id,
        related_type=RELATED_TYPE_SUBMISSION,
        related_id=submission_id,
    )
    return NotificationProducer(session).fan_out([delivery])


def broadcast_system_announcement(
    session: Session,
    *,
    title: str,
    content: str,
    recipient_ids: Iterable[int],
    sender_id: int | None = None,
) -> list[Notification]:
    """Deliver an announcement to every listed recipient."""

    data = {"title": title, "content": content}
    deliveries = [
        Delivery(
            type=NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
            recipient_id=recipient_id,
            template_data=data,
            sender_id=sender_id,
        )
        for recipient_id in _unique_recipients(recipient_ids)
    ]
    return NotificationProducer(session).fan_out(deliveries)


__all__ = [
    "broadcast_system_announcement",
    "notify_assignment_published",
    "notify_assignment_submitted",
    "notify_course_enrollment",
    "notify_grade_assigned",
    "notify_user_registered",
]
