"""Public helpers for producing and reading notifications."""

from .dispatch import run_notification_task, schedule_notification_task
from .events import (
    broadcast_system_announcement,
    notify_assignment_published,
    notify_assignment_submitted,
    notify_course_enrollment,
    notify_grade_assigned,
    notify_user_registered,
)
from .feed import (
    clear_notifications,
    count_unread_notifications,
    create_notification,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    resolve_recipient_scope,
)
from .producer import Delivery, NotificationProducer

__all__ = [
    "Delivery",
    "NotificationProducer",
    "broadcast_system_announcement",
    "notify_assignment_published",
    "notify_assignment_submitted",
    "notify_course_enrollment",
    "notify_grade_assigned",
    "notify_user_registered",
    "clear_notifications",
    "count_unread_notifications",
    "create_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "resolve_recipient_scope",
    "run_notification_task",
    "schedule_notification_task",
]
