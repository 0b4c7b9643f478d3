"""Use cases backing the notification feed endpoints."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Mapping

from sqlalchemy.orm import Session

from classroom.domain.entities import Notification, User
from classroom.domain.exceptions import NotFoundError, PermissionDeniedError
from classroom.infrastructure.repositories import NotificationRepository

from .producer import NotificationProducer
from .templates import AUDIENCE_RECIPIENT


def resolve_recipient_scope(actor: User, recipient_id: int | None) -> int | None:
    """Return the recipient filter ``actor`` is allowed to use.

    ``None`` (the unscoped view over every recipient) is only handed to
    administrators; everyone else is pinned to their own id.
    """

    if recipient_id is None:
        return None if actor.is_admin() else actor.id
    if recipient_id != actor.id and not actor.is_admin():
        raise PermissionDeniedError("无权访问其他用户的通知")
    return recipient_id


def list_notifications(
    session: Session,
    *,
    actor: User,
    recipient_id: int | None = None,
    limit: int | None = 50,
    unread_only: bool = False,
) -> Sequence[Notification]:
    scope = resolve_recipient_scope(actor, recipient_id)
    return NotificationRepository(session).list_for_recipient(
        scope, limit=limit, unread_only=unread_only
    )


def count_unread_notifications(
    session: Session, *, actor: User, recipient_id: int | None = None
) -> int:
    scope = resolve_recipient_scope(actor, recipient_id)
    return NotificationRepository(session).count_unread(scope)


def mark_notification_read(
    session: Session, *, actor: User, notification_id: int
) -> Notification:
    """Mark one notification as read and return its current state.

    Re-marking an already read notification succeeds without touching
    ``read_at``.
    """

    repository = NotificationRepository(session)
    notification = repository.get(notification_id)
    if notification is None:
        raise NotFoundError("通知不存在")
    if notification.recipient_id != actor.id and not actor.is_admin():
        raise PermissionDeniedError("无权操作其他用户的通知")
    if not notification.is_read and repository.mark_as_read(notification_id):
        notification = repository.get(notification_id) or notification
    return notification


def mark_all_notifications_read(
    session: Session, *, actor: User, recipient_id: int | None = None
) -> int:
    scope = resolve_recipient_scope(actor, recipient_id)
    return NotificationRepository(session).mark_all_as_read(scope)


def clear_notifications(
    session: Session, *, actor: User, recipient_id: int | None = None
) -> int:
    scope = resolve_recipient_scope(actor, recipient_id)
    return NotificationRepository(session).clear_all(scope)


def create_notification(
    session: Session,
    *,
    actor: User,
    notification_type: str,
    recipient_id: int,
    data: Mapping[str, Any] | None = None,
    title: str | None = None,
    message: str | None = None,
    sender_id: int | None = None,
    related_type: str | None = None,
    related_id: int | None = None,
    priority: str | None = None,
    audience: str | None = None,
) -> Notification:
    """Manual creation path; missing text is rendered like producer output."""

    return NotificationProducer(session).produce(
        notification_type,
        recipient_id,
        data,
        audience=audience or AUDIENCE_RECIPIENT,
        sender_id=sender_id if sender_id is not None else actor.id,
        related_type=related_type,
        related_id=related_id,
        priority=priority,
        title=title,
        message=message,
    )


__all__ = [
    "clear_notifications",
    "count_unread_notifications",
    "create_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "resolve_recipient_scope",
]
