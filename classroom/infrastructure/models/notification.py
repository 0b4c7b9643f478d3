"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import expression

from classroom.domain.entities import TITLE_MAX_LENGTH
from classroom.infrastructure.database import Base
from classroom.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of a single-recipient notification."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_created", "recipient_id", "created_at"),
        Index("ix_notifications_recipient_unread", "recipient_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    message = Column(Text, nullable=False)
    # No foreign keys: senders may be system actors and recipients are
    # resolved by the identity provider.
    sender_id = Column(Integer, nullable=True)
    recipient_id = Column(Integer, nullable=False)
    related_type = Column(String(50), nullable=True)
    related_id = Column(Integer, nullable=True)
    priority = Column(String(10), nullable=False, default="normal")
    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
