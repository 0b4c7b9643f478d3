"""Turn domain events into stored notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from classroom.domain.entities import Notification
from classroom.domain.exceptions import NotificationError, ValidationError
from classroom.infrastructure.repositories import NotificationRepository

from .templates import (
    AUDIENCE_RECIPIENT,
    GENERIC_TEMPLATE,
    default_priority,
    get_template,
    render,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """One recipient's share of a domain event."""

    type: str
    recipient_id: int
    template_data: Mapping[str, Any] = field(default_factory=dict)
    audience: str = AUDIENCE_RECIPIENT
    sender_id: int | None = None
    related_type: str | None = None
    related_id: int | None = None
    priority: str | None = None


class NotificationProducer:
    """Render templated messages and insert one row per recipient.

    The producer never deduplicates: producing the same event twice stores two
    rows.
    """

    def __init__(self, session: Session) -> None:
        self._repository = NotificationRepository(session)

    def produce(
        self,
        notification_type: str,
        recipient_id: int,
        template_data: Mapping[str, Any] | None = None,
        *,
        audience: str = AUDIENCE_RECIPIENT,
        sender_id: int | None = None,
        related_type: str | None = None,
        related_id: int | None = None,
        priority: str | None = None,
        title: str | None = None,
        message: str | None = None,
    ) -> Notification:
        """Store a notification for ``recipient_id`` and return it.

        ``title`` and ``message`` override the rendered template when given.
        Unknown types render the generic wording instead of failing.
        """

        if not notification_type:
            raise ValidationError("通知类型不能为空")
        if recipient_id is None:
            raise ValidationError("接收者ID不能为空")

        template = get_template(notification_type, audience)
        rendered_title = title or render(template.title, template_data) or GENERIC_TEMPLATE.title
        rendered_message = (
            message or render(template.message, template_data) or GENERIC_TEMPLATE.message
        )

        notification = Notification(
            id=None,
            type=notification_type,
            title=rendered_title,
            message=rendered_message,
            recipient_id=recipient_id,
            sender_id=sender_id,
            related_type=related_type,
            related_id=related_id,
            priority=priority or default_priority(notification_type),
        )
        saved = self._repository.create(notification)
        logger.info(
            "Stored %s notification %s for recipient %s",
            saved.type,
            saved.id,
            saved.recipient_id,
        )
        return saved

    def deliver(self, delivery: Delivery) -> Notification:
        return self.produce(
            delivery.type,
            delivery.recipient_id,
            delivery.template_data,
            audience=delivery.audience,
            sender_id=delivery.sender_id,
            related_type=delivery.related_type,
            related_id=delivery.related_id,
            priority=delivery.priority,
        )

    def fan_out(self, deliveries: Iterable[Delivery]) -> list[Notification]:
        """Insert every delivery independently.

        A failing recipient is logged and skipped; the remaining deliveries
        are still attempted and nothing already stored is rolled back.
        """

        saved: list[Notification] = []
        for delivery in deliveries:
            try:
                saved.append(self.deliver(delivery))
            except NotificationError:
                logger.exception(
                    "Could not deliver %s notification to recipient %s",
                    delivery.type,
                    delivery.recipient_id,
                )
        return saved


__all__ = ["Delivery", "NotificationProducer"]
