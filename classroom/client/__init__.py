"""Headless counterpart of the browser notification dropdown."""

from .feed_client import NotificationFeedClient, notification_from_payload
from .poller import NotificationPoller, PollerConfig, PollerState, SessionIdentity
from .rendering import FeedItemView, FeedView, build_feed_view, resolve_route, time_ago

__all__ = [
    "FeedItemView",
    "FeedView",
    "NotificationFeedClient",
    "NotificationPoller",
    "PollerConfig",
    "PollerState",
    "SessionIdentity",
    "build_feed_view",
    "notification_from_payload",
    "resolve_route",
    "time_ago",
]
