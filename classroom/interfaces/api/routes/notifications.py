"""Endpoints backing the notification feed polled by the browser client."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from classroom.application.use_cases.notifications import (
    broadcast_system_announcement,
    clear_notifications,
    count_unread_notifications,
    create_notification,
    list_notifications as list_notifications_uc,
    mark_all_notifications_read,
    mark_notification_read,
    schedule_notification_task,
)
from classroom.config import get_settings
from classroom.domain.entities import Notification, User
from classroom.domain.exceptions import (
    NotFoundError,
    NotificationError,
    PermissionDeniedError,
    ValidationError,
)
from classroom.infrastructure.database import get_db
from classroom.interfaces.api.dependencies import get_current_active_user, require_admin
from classroom.interfaces.api.schemas import (
    AnnouncementCreate,
    CountRead,
    Envelope,
    NotificationCreate,
    NotificationMarkAllReadRequest,
    NotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
settings = get_settings()


def _to_read_model(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def _to_http_exception(exc: NotificationError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=Envelope[list[NotificationRead]])
def list_notifications(
    recipient_id: int | None = Query(default=None, alias="recipientId"),
    limit: int | None = Query(default=None, ge=1),
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Return notifications newest first for ``recipientId``.

    Without ``recipientId`` administrators receive every notification and
    other users their own.
    """

    effective_limit = min(
        limit or settings.notification_feed_limit, settings.notification_feed_max_limit
    )
    try:
        notifications = list_notifications_uc(
            db,
            actor=current_user,
            recipient_id=recipient_id,
            limit=effective_limit,
            unread_only=unread_only,
        )
    except PermissionDeniedError as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=[_to_read_model(notification) for notification in notifications])


@router.get("/unread-count", response_model=Envelope[CountRead])
def unread_count(
    recipient_id: int | None = Query(default=None, alias="recipientId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Return the number of unread notifications in scope."""

    try:
        count = count_unread_notifications(db, actor=current_user, recipient_id=recipient_id)
    except PermissionDeniedError as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=CountRead(count=count))


@router.put("/mark-all-read", response_model=Envelope[CountRead])
def mark_all_read(
    payload: NotificationMarkAllReadRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Mark every unread notification in scope as read and report how many flipped."""

    try:
        count = mark_all_notifications_read(
            db, actor=current_user, recipient_id=payload.recipient_id if payload else None
        )
    except PermissionDeniedError as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=CountRead(count=count), message=f"已将 {count} 条通知标记为已读")


@router.delete("/clear-all", response_model=Envelope[CountRead])
def clear_all(
    recipient_id: int | None = Query(default=None, alias="recipientId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Delete every notification in scope and report how many were removed."""

    try:
        count = clear_notifications(db, actor=current_user, recipient_id=recipient_id)
    except PermissionDeniedError as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=CountRead(count=count), message=f"已清空 {count} 条通知")


@router.put("/{notification_id}/read", response_model=Envelope[NotificationRead])
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Mark a single notification as read; unknown ids answer 404."""

    try:
        notification = mark_notification_read(
            db, actor=current_user, notification_id=notification_id
        )
    except (NotFoundError, PermissionDeniedError) as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=_to_read_model(notification))


@router.post(
    "",
    response_model=Envelope[NotificationRead],
    status_code=status.HTTP_201_CREATED,
)
def create(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Create a notification by hand, rendering the message when it is omitted."""

    try:
        notification = create_notification(
            db,
            actor=current_user,
            notification_type=payload.type,
            recipient_id=payload.recipient_id,
            data=payload.data,
            title=payload.title,
            message=payload.message,
            sender_id=payload.sender_id,
            related_type=payload.related_type,
            related_id=payload.related_id,
            priority=payload.priority,
            audience=payload.audience,
        )
    except ValidationError as exc:
        raise _to_http_exception(exc) from exc
    return Envelope(data=_to_read_model(notification), message="通知创建成功")


@router.post(
    "/announcements",
    response_model=Envelope[CountRead],
    status_code=status.HTTP_202_ACCEPTED,
)
def announce(
    payload: AnnouncementCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
):
    """Queue a system announcement for every listed recipient."""

    recipients = list(dict.fromkeys(payload.recipient_ids))
    schedule_notification_task(
        background_tasks,
        broadcast_system_announcement,
        title=payload.title,
        content=payload.message,
        recipient_ids=recipients,
        sender_id=current_user.id,
    )
    return Envelope(data=CountRead(count=len(recipients)), message="公告已加入发送队列")
