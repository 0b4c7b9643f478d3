"""Polling state machine that keeps one tab's notification dropdown in sync."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable

from classroom.domain.entities import Notification
from classroom.domain.exceptions import NetworkError, NotFoundError

from .feed_client import DEFAULT_TIMEOUT, NotificationFeedClient
from .rendering import FeedView, build_feed_view, resolve_route, translate

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]
VisibilityProbe = Callable[[], bool]
PendingAction = Callable[[], Awaitable[None]]


class PollerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RENDERED = "rendered"
    ERROR = "error"


@dataclass(frozen=True)
class SessionIdentity:
    """The signed-in user as stored by the browser session."""

    id: int
    role: str
    token: str


@dataclass(frozen=True)
class PollerConfig:
    base_url: str
    poll_interval: float = 60.0
    request_timeout: float = DEFAULT_TIMEOUT
    language: str = "zh"
    max_visible: int = 10
    page_title: str = ""


class NotificationPoller:
    """Fetch the current user's feed on an interval and apply local interactions.

    Only one fetch is ever in flight; a tick that arrives while the previous
    request is still pending is skipped. Ticks are also skipped while
    ``is_visible`` reports that the tab is hidden.
    """

    def __init__(
        self,
        identity: SessionIdentity,
        config: PollerConfig,
        *,
        client: NotificationFeedClient | None = None,
        is_visible: VisibilityProbe | None = None,
        navigator: Navigator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.identity = identity
        self.config = config
        self._owns_client = client is None
        self._client = client or NotificationFeedClient(
            config.base_url, identity.token, timeout=config.request_timeout
        )
        self._is_visible = is_visible or (lambda: True)
        self._navigator = navigator
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.state = PollerState.IDLE
        self.notifications: list[Notification] = []
        self.panel_open = False
        self.load_error: str | None = None
        self.pending_error: str | None = None
        self._pending_action: PendingAction | None = None
        self._in_flight = False
        self._task: asyncio.Task | None = None
        self._first_load: asyncio.Future | None = None

    @property
    def unread_count(self) -> int:
        return sum(1 for notification in self.notifications if not notification.is_read)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> bool:
        """Fetch the feed once. Returns ``False`` when skipped or failed."""

        if self._in_flight:
            logger.debug("Skipping refresh for user %s: request in flight", self.identity.id)
            return False

        self._in_flight = True
        self.state = PollerState.LOADING
        try:
            notifications = await self._client.list_notifications(self.identity.id)
        except NetworkError as exc:
            logger.warning("Failed to load notifications for user %s: %s", self.identity.id, exc)
            self.state = PollerState.ERROR
            self.load_error = translate("notifications-error", self.config.language)
            return False
        finally:
            self._in_flight = False

        self.notifications = notifications
        self.load_error = None
        self.state = PollerState.RENDERED
        return True

    async def start(self) -> None:
        """Load the feed immediately, then keep polling in the background."""

        if not self.running:
            self._first_load = asyncio.get_running_loop().create_future()
            self._task = asyncio.create_task(self._run(self._first_load))
        await asyncio.shield(self._first_load)

    async def _run(self, first_load: asyncio.Future) -> None:
        try:
            await self._tick()
        finally:
            if not first_load.done():
                first_load.set_result(None)
        while True:
            await asyncio.sleep(self.config.poll_interval)
            if self._is_visible():
                await self._tick()

    async def _tick(self) -> None:
        try:
            await self.refresh()
        except Exception:
            logger.exception("Notification poll failed for user %s", self.identity.id)
            self.state = PollerState.ERROR
            self.load_error = translate("notifications-error", self.config.language)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Notification polling for user %s ended with an error", self.identity.id)

    async def aclose(self) -> None:
        await self.stop()
        if self._owns_client:
            await self._client.aclose()

    def _record_failure(self, exc: Exception, action: PendingAction) -> None:
        logger.warning("Notification action failed for user %s: %s", self.identity.id, exc)
        self.pending_error = str(exc) or translate("notifications-error", self.config.language)
        self._pending_action = action

    def _clear_failure(self) -> None:
        self.pending_error = None
        self._pending_action = None

    async def open_panel(self) -> None:
        """Bell click: mark everything read locally, then confirm with the server.

        When the server call fails the local change is rolled back and
        ``pending_error`` is set so the dropdown can offer :meth:`retry`.
        """

        self.panel_open = True
        unread = [notification for notification in self.notifications if not notification.is_read]
        if not unread:
            return

        read_at = self._clock()
        for notification in unread:
            notification.is_read = True
            notification.read_at = read_at

        try:
            await self._client.mark_all_read(self.identity.id)
        except NetworkError as exc:
            for notification in unread:
                notification.is_read = False
                notification.read_at = None
            self._record_failure(exc, self.open_panel)
            return
        self._clear_failure()

    def close_panel(self) -> None:
        self.panel_open = False

    async def open_item(self, notification_id: int) -> str | None:
        """Mark one item read and navigate to what it refers to.

        Returns the route handed to the navigator, if any.
        """

        notification = next(
            (item for item in self.notifications if item.id == notification_id), None
        )
        if notification is None:
            return None

        if not notification.is_read:
            try:
                updated = await self._client.mark_read(notification_id)
            except NotFoundError:
                # Deleted on the server since the last poll.
                self.notifications.remove(notification)
                return None
            except NetworkError as exc:
                self._record_failure(exc, lambda: self._mark_item_read(notification_id))
            else:
                notification.is_read = True
                notification.read_at = updated.read_at or self._clock()
                self._clear_failure()

        route = resolve_route(notification)
        if route and self._navigator is not None:
            self._navigator(route)
        return route

    async def _mark_item_read(self, notification_id: int) -> None:
        try:
            updated = await self._client.mark_read(notification_id)
        except NotFoundError:
            self.notifications = [n for n in self.notifications if n.id != notification_id]
            self._clear_failure()
            return
        except NetworkError as exc:
            self._record_failure(exc, lambda: self._mark_item_read(notification_id))
            return
        for notification in self.notifications:
            if notification.id == notification_id:
                notification.is_read = True
                notification.read_at = updated.read_at or self._clock()
        self._clear_failure()

    async def clear_all(self) -> None:
        """Delete every notification of the current user, then reload."""

        try:
            await self._client.clear_all(self.identity.id)
        except NetworkError as exc:
            self._record_failure(exc, self.clear_all)
            return
        self._clear_failure()
        self.notifications = []
        await self.refresh()

    async def retry(self) -> None:
        """Re-issue the last failed action, or reload after a failed fetch."""

        action = self._pending_action
        if action is not None:
            self._clear_failure()
            await action()
            return
        await self.refresh()

    def render(self) -> FeedView:
        return build_feed_view(
            self.notifications,
            now=self._clock(),
            language=self.config.language,
            max_visible=self.config.max_visible,
            loading=self.state is PollerState.LOADING and not self.notifications,
            error=self.load_error or self.pending_error,
            base_title=self.config.page_title,
        )


__all__ = [
    "NotificationPoller",
    "PollerConfig",
    "PollerState",
    "SessionIdentity",
]
