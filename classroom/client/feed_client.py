"""Async HTTP client for the notification feed endpoints."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

import httpx

from classroom.domain.entities import Notification
from classroom.domain.exceptions import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def notification_from_payload(payload: Mapping[str, Any]) -> Notification:
    """Build a :class:`Notification` from one item of the feed response."""

    return Notification(
        id=payload["id"],
        type=payload["type"],
        title=payload.get("title") or "",
        message=payload.get("message") or "",
        recipient_id=payload["recipient_id"],
        sender_id=payload.get("sender_id"),
        related_type=payload.get("related_type"),
        related_id=payload.get("related_id"),
        priority=payload.get("priority") or "normal",
        is_read=bool(payload.get("is_read")),
        read_at=_parse_datetime(payload.get("read_at")),
        created_at=_parse_datetime(payload.get("created_at")),
    )


def _decode_notifications(data: Any) -> list[Notification]:
    try:
        return [notification_from_payload(item) for item in data or []]
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed notification payload: %r", exc)
        raise NetworkError("通知数据格式无效") from exc


class NotificationFeedClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the feed's envelope."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NotificationFeedClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        raise_not_found: bool = False,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"请求失败: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or f"HTTP {response.status_code}"
        if raise_not_found and response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(message)
        if response.is_error or not body.get("success"):
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise NetworkError(message)
        return body.get("data")

    async def list_notifications(
        self,
        recipient_id: int | None = None,
        *,
        limit: int | None = None,
        unread_only: bool = False,
    ) -> list[Notification]:
        params: dict[str, Any] = {}
        if recipient_id is not None:
            params["recipientId"] = recipient_id
        if limit is not None:
            params["limit"] = limit
        if unread_only:
            params["unreadOnly"] = "true"
        data = await self._request("GET", "/notifications", params=params)
        return _decode_notifications(data)

    async def unread_count(self, recipient_id: int | None = None) -> int:
        params = {"recipientId": recipient_id} if recipient_id is not None else None
        data = await self._request("GET", "/notifications/unread-count", params=params)
        return int((data or {}).get("count", 0))

    async def mark_read(self, notification_id: int) -> Notification:
        data = await self._request(
            "PUT", f"/notifications/{notification_id}/read", raise_not_found=True
        )
        (notification,) = _decode_notifications([data])
        return notification

    async def mark_all_read(self, recipient_id: int | None = None) -> int:
        data = await self._request(
            "PUT", "/notifications/mark-all-read", json={"recipientId": recipient_id}
        )
        return int((data or {}).get("count", 0))

    async def clear_all(self, recipient_id: int | None = None) -> int:
        params = {"recipientId": recipient_id} if recipient_id is not None else None
        data = await self._request("DELETE", "/notifications/clear-all", params=params)
        return int((data or {}).get("count", 0))


__all__ = ["DEFAULT_TIMEOUT", "NotificationFeedClient", "notification_from_payload"]
