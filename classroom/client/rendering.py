"""Turn the poller's local notifications into a view model for the dropdown."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from classroom.domain.entities import (
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
    NOTIFICATION_TYPE_COURSE_ENROLLMENT,
    NOTIFICATION_TYPE_GRADE_ASSIGNED,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
    NOTIFICATION_TYPE_USER_REGISTRATION,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
    RELATED_TYPE_ASSIGNMENT,
    RELATED_TYPE_COURSE,
    RELATED_TYPE_SUBMISSION,
    Notification,
)

DEFAULT_LANGUAGE = "zh"
EMPTY_ICON = "📭"


@dataclass(frozen=True)
class TypeStyle:
    icon: str
    color: str


TYPE_STYLES: dict[str, TypeStyle] = {
    NOTIFICATION_TYPE_USER_REGISTRATION: TypeStyle("👤", "#3ea7ff"),
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT: TypeStyle("📚", "#30d158"),
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION: TypeStyle("📝", "#ff9500"),
    NOTIFICATION_TYPE_GRADE_ASSIGNED: TypeStyle("✅", "#30d158"),
    NOTIFICATION_TYPE_COURSE_ENROLLMENT: TypeStyle("🎓", "#3ea7ff"),
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT: TypeStyle("📢", "#ff3b30"),
}
DEFAULT_STYLE = TypeStyle("🔔", "#8e8e93")

_ROUTE_PREFIXES = {
    RELATED_TYPE_COURSE: "/course",
    RELATED_TYPE_ASSIGNMENT: "/assignment",
    RELATED_TYPE_SUBMISSION: "/submission",
}

_HIGHLIGHTED_PRIORITIES = frozenset({PRIORITY_HIGH, PRIORITY_URGENT})
_PRIORITY_RANK = {PRIORITY_URGENT: 0, PRIORITY_HIGH: 1}

_TITLE_PREFIX = re.compile(r"^\(\d+\)\s*")

TRANSLATIONS: dict[str, dict[str, str]] = {
    "zh": {
        "notification-center": "通知中心",
        "mark-all-read": "全部已读",
        "loading": "加载中...",
        "clear-all": "清空所有通知",
        "no-notifications": "暂无通知",
        "minutes-ago": "分钟前",
        "hours-ago": "小时前",
        "days-ago": "天前",
        "just-now": "刚刚",
        "notifications-error": "加载通知失败",
        "retry": "重试",
    },
    "en": {
        "notification-center": "Notification Center",
        "mark-all-read": "Mark All Read",
        "loading": "Loading...",
        "clear-all": "Clear All Notifications",
        "no-notifications": "No notifications",
        "minutes-ago": "minutes ago",
        "hours-ago": "hours ago",
        "days-ago": "days ago",
        "just-now": "just now",
        "notifications-error": "Failed to load notifications",
        "retry": "Retry",
    },
}


def translate(key: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Look ``key`` up for ``language``, falling back to Chinese and then the key."""

    table = TRANSLATIONS.get(language) or TRANSLATIONS[DEFAULT_LANGUAGE]
    return table.get(key) or TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def style_for(notification_type: str) -> TypeStyle:
    return TYPE_STYLES.get(notification_type, DEFAULT_STYLE)


def time_ago(created_at: datetime | None, now: datetime, language: str = DEFAULT_LANGUAGE) -> str:
    """Describe how long ago ``created_at`` happened, in whole units."""

    if created_at is None:
        return translate("just-now", language)
    if (created_at.tzinfo is None) != (now.tzinfo is None):
        created_at = created_at.replace(tzinfo=now.tzinfo)

    seconds = max(int((now - created_at).total_seconds()), 0)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days} {translate('days-ago', language)}"
    if hours > 0:
        return f"{hours} {translate('hours-ago', language)}"
    if minutes > 0:
        return f"{minutes} {translate('minutes-ago', language)}"
    return translate("just-now", language)


def resolve_route(notification: Notification) -> str | None:
    """Return the client path for the object a notification points at, if any."""

    prefix = _ROUTE_PREFIXES.get(notification.related_type or "")
    if prefix is None or notification.related_id is None:
        return None
    return f"{prefix}/{notification.related_id}"


def page_title(base_title: str, unread_count: int) -> str:
    """Prefix ``base_title`` with ``(n) `` while there are unread notifications."""

    original = _TITLE_PREFIX.sub("", base_title)
    if unread_count > 0:
        return f"({unread_count}) {original}"
    return original


def sort_for_display(notifications: Iterable[Notification]) -> list[Notification]:
    """Unread urgent and high items first, then everything newest first."""

    def _created_key(notification: Notification) -> tuple[float, int]:
        created = notification.created_at
        return (created.timestamp() if created else 0.0, notification.id or 0)

    by_recency = sorted(notifications, key=_created_key, reverse=True)
    # sorted() is stable, so recency is kept inside each rank.
    return sorted(
        by_recency,
        key=lambda n: _PRIORITY_RANK.get(n.priority, 2) if not n.is_read else 2,
    )


@dataclass(frozen=True)
class FeedItemView:
    id: int
    type: str
    title: str
    message: str
    icon: str
    color: str
    time_ago: str
    is_read: bool
    highlighted: bool
    route: str | None


@dataclass(frozen=True)
class FeedView:
    """Everything the dropdown and the bell need to draw themselves."""

    heading: str
    unread_count: int
    badge: str | None
    page_title: str
    items: Sequence[FeedItemView] = field(default_factory=tuple)
    loading: bool = False
    loading_label: str | None = None
    empty_label: str | None = None
    empty_icon: str | None = None
    error: str | None = None
    retry_label: str | None = None
    mark_all_label: str = ""
    clear_all_label: str = ""


def build_feed_view(
    notifications: Sequence[Notification],
    *,
    now: datetime,
    language: str = DEFAULT_LANGUAGE,
    max_visible: int = 10,
    loading: bool = False,
    error: str | None = None,
    base_title: str = "",
) -> FeedView:
    unread_count = sum(1 for notification in notifications if not notification.is_read)
    items = tuple(
        FeedItemView(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            icon=style_for(notification.type).icon,
            color=style_for(notification.type).color,
            time_ago=time_ago(notification.created_at, now, language),
            is_read=notification.is_read,
            highlighted=notification.priority in _HIGHLIGHTED_PRIORITIES,
            route=resolve_route(notification),
        )
        for notification in sort_for_display(notifications)[:max_visible]
    )
    show_empty = not items and not loading and error is None
    return FeedView(
        heading=translate("notification-center", language),
        unread_count=unread_count,
        badge=str(unread_count) if unread_count > 0 else None,
        page_title=page_title(base_title, unread_count),
        items=items,
        loading=loading,
        loading_label=translate("loading", language) if loading else None,
        empty_label=translate("no-notifications", language) if show_empty else None,
        empty_icon=EMPTY_ICON if show_empty else None,
        error=error,
        retry_label=translate("retry", language) if error is not None else None,
        mark_all_label=translate("mark-all-read", language),
        clear_all_label=translate("clear-all", language),
    )


__all__ = [
    "DEFAULT_STYLE",
    "FeedItemView",
    "FeedView",
    "TRANSLATIONS",
    "TYPE_STYLES",
    "TypeStyle",
    "build_feed_view",
    "page_title",
    "resolve_route",
    "sort_for_display",
    "style_for",
    "time_ago",
    "translate",
]
