"""Persistence helpers for notification entities."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from classroom.domain.entities import PRIORITIES, TITLE_MAX_LENGTH, Notification
from classroom.domain.exceptions import StorageError, ValidationError
from classroom.infrastructure.models import NotificationModel
from classroom.utils import ensure_app_timezone, now_in_app_naive_datetime

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Recipient-scoped CRUD over :class:`Notification` rows.

    Every method that receives ``recipient_id=None`` operates on the whole
    table; authorization for that unscoped view happens in the API layer.
    Database failures roll the session back and surface as
    :class:`StorageError` so the same session can keep serving independent
    writes.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        """Insert ``notification`` and return it with server-assigned fields."""

        self._validate_for_insert(notification)
        model = NotificationModel(
            type=notification.type.strip(),
            title=notification.title or "",
            message=notification.message or "",
            sender_id=notification.sender_id,
            recipient_id=notification.recipient_id,
            related_type=notification.related_type,
            related_id=notification.related_id,
            priority=notification.priority,
            is_read=False,
            read_at=None,
            created_at=now_in_app_naive_datetime(),
        )
        with self._storage_guard("insert notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> Notification | None:
        with self._storage_guard("load notification"):
            model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_recipient(
        self,
        recipient_id: int | None,
        *,
        limit: int | None = 50,
        unread_only: bool = False,
    ) -> Sequence[Notification]:
        """Return notifications newest first, optionally scoped to a recipient."""

        query = self._scoped_query(recipient_id)
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        with self._storage_guard("list notifications"):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def count_unread(self, recipient_id: int | None) -> int:
        query = self._scoped_query(recipient_id).filter(
            NotificationModel.is_read.is_(False)
        )
        with self._storage_guard("count unread notifications"):
            return query.count()

    def mark_as_read(self, notification_id: int) -> bool:
        """Flip a single notification to read.

        Returns ``True`` only when the row transitioned; unknown ids and rows
        that were already read are left untouched so ``read_at`` keeps its
        first value.
        """

        query = self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id,
            NotificationModel.is_read.is_(False),
        )
        with self._storage_guard("mark notification as read"):
            flipped = query.update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.read_at: now_in_app_naive_datetime(),
                },
                synchronize_session=False,
            )
            self.session.commit()
        return flipped > 0

    def mark_all_as_read(self, recipient_id: int | None = None) -> int:
        """Flip every unread row in scope and return how many transitioned."""

        query = self._scoped_query(recipient_id).filter(
            NotificationModel.is_read.is_(False)
        )
        with self._storage_guard("mark all notifications as read"):
            flipped = query.update(
                {
                    NotificationModel.is_read: True,
                    NotificationModel.read_at: now_in_app_naive_datetime(),
                },
                synchronize_session=False,
            )
            self.session.commit()
        return flipped

    def clear_all(self, recipient_id: int | None = None) -> int:
        """Delete every row in scope and return the number removed."""

        query = self._scoped_query(recipient_id)
        with self._storage_guard("clear notifications"):
            deleted = query.delete(synchronize_session=False)
            self.session.commit()
        return deleted

    def _scoped_query(self, recipient_id: int | None) -> Query:
        query = self.session.query(NotificationModel)
        if recipient_id is not None:
            query = query.filter(NotificationModel.recipient_id == recipient_id)
        return query

    @contextmanager
    def _storage_guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise StorageError(f"Failed to {action}") from exc

    @staticmethod
    def _validate_for_insert(notification: Notification) -> None:
        if notification.recipient_id is None:
            raise ValidationError("接收者ID不能为空")
        if not notification.type or not notification.type.strip():
            raise ValidationError("通知类型不能为空")
        if notification.priority not in PRIORITIES:
            raise ValidationError(f"无效的通知优先级: {notification.priority}")
        if len(notification.title or "") > TITLE_MAX_LENGTH:
            raise ValidationError(f"通知标题不能超过{TITLE_MAX_LENGTH}个字符")

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=model.type,
            title=model.title,
            message=model.message,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            related_type=model.related_type,
            related_id=model.related_id,
            priority=model.priority,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
