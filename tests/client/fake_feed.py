"""In-memory stand-in for the feed endpoints, served through httpx.MockTransport."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone

import httpx

BASE_URL = "http://classroom.test"
_READ_PATH = re.compile(r"^/notifications/(\d+)/read$")


class FakeFeed:
    def __init__(self) -> None:
        self.items: list[dict] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_paths: set[str] = set()
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def add(self, notification_id: int, recipient_id: int = 7, **overrides) -> dict:
        item = {
            "id": notification_id,
            "type": "course_enrollment",
            "title": "选课成功",
            "message": "内容",
            "sender_id": None,
            "recipient_id": recipient_id,
            "related_type": None,
            "related_id": None,
            "priority": "normal",
            "is_read": False,
            "read_at": None,
            "created_at": (self.now - timedelta(minutes=notification_id)).isoformat(),
        }
        item.update(overrides)
        self.items.append(item)
        return item

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        if path in self.fail_paths:
            return httpx.Response(500, json={"success": False, "message": "服务器内部错误，请稍后重试"})
        if request.headers.get("Authorization") != "Bearer token-7":
            return httpx.Response(401, json={"success": False, "message": "凭证无效"})

        if request.method == "GET" and path == "/notifications":
            recipient = int(request.url.params.get("recipientId", 7))
            data = [item for item in self.items if item["recipient_id"] == recipient]
            data.sort(key=lambda item: item["created_at"], reverse=True)
            return httpx.Response(200, json={"success": True, "data": data})

        if request.method == "PUT" and path == "/notifications/mark-all-read":
            recipient = json.loads(request.content or b"{}").get("recipientId") or 7
            count = 0
            for item in self.items:
                if item["recipient_id"] == recipient and not item["is_read"]:
                    item["is_read"] = True
                    item["read_at"] = self.now.isoformat()
                    count += 1
            return httpx.Response(200, json={"success": True, "data": {"count": count}})

        match = _READ_PATH.match(path)
        if request.method == "PUT" and match:
            notification_id = int(match.group(1))
            for item in self.items:
                if item["id"] == notification_id:
                    if not item["is_read"]:
                        item["is_read"] = True
                        item["read_at"] = self.now.isoformat()
                    return httpx.Response(200, json={"success": True, "data": item})
            return httpx.Response(404, json={"success": False, "message": "通知不存在"})

        if request.method == "DELETE" and path == "/notifications/clear-all":
            recipient = int(request.url.params.get("recipientId", 7))
            before = len(self.items)
            self.items = [item for item in self.items if item["recipient_id"] != recipient]
            return httpx.Response(
                200, json={"success": True, "data": {"count": before - len(self.items)}}
            )

        return httpx.Response(404, json={"success": False, "message": "Not Found"})
