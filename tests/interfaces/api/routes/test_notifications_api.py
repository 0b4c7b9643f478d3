"""Integration tests for the notification feed endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from classroom.application.use_cases.notifications import NotificationProducer
from classroom.domain.entities import ROLE_ADMIN, ROLE_TEACHER, TITLE_MAX_LENGTH
from classroom.domain.exceptions import StorageError
from classroom.infrastructure.database import SessionLocal
from classroom.infrastructure.repositories import NotificationRepository
from main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def login(client: TestClient):
    def _login(username: str, password: str = "Secret123") -> dict[str, str]:
        response = client.post(
            "/auth/token", data={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


def _seed(recipient_id: int, count: int = 1, notification_type: str = "course_enrollment"):
    with SessionLocal() as session:
        producer = NotificationProducer(session)
        return [
            producer.produce(
                notification_type,
                recipient_id,
                {"studentName": "张三", "courseName": f"课程{index}"},
                related_type="course",
                related_id=index + 1,
            )
            for index in range(count)
        ]


def test_list_returns_envelope_for_own_feed(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")
    other = make_user("lisi")
    _seed(student.id, 2)
    _seed(other.id, 1)
    headers = login("zhangsan")

    response = client.get("/notifications", params={"recipientId": student.id}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["data"]) == 2
    assert {item["recipient_id"] for item in body["data"]} == {student.id}
    assert all(item["is_read"] is False for item in body["data"])
    assert body["data"][0]["id"] > body["data"][1]["id"]


def test_list_without_recipient_is_scoped_to_caller(
    client: TestClient, make_user, login
) -> None:
    student = make_user("zhangsan")
    other = make_user("lisi")
    _seed(student.id, 1)
    _seed(other.id, 3)

    response = client.get("/notifications", headers=login("zhangsan"))

    assert [item["recipient_id"] for item in response.json()["data"]] == [student.id]


def test_admin_sees_global_feed(client: TestClient, make_user, login) -> None:
    make_user("root", role=ROLE_ADMIN)
    first = make_user("zhangsan")
    second = make_user("lisi")
    _seed(first.id, 1)
    _seed(second.id, 2)
    headers = login("root")

    assert len(client.get("/notifications", headers=headers).json()["data"]) == 3
    scoped = client.get("/notifications", params={"recipientId": second.id}, headers=headers)
    assert len(scoped.json()["data"]) == 2


def test_reading_someone_elses_feed_is_forbidden(client: TestClient, make_user, login) -> None:
    make_user("zhangsan")
    other = make_user("lisi")
    headers = login("zhangsan")

    for method, url, kwargs in (
        ("GET", "/notifications", {"params": {"recipientId": other.id}}),
        ("GET", "/notifications/unread-count", {"params": {"recipientId": other.id}}),
        ("PUT", "/notifications/mark-all-read", {"json": {"recipientId": other.id}}),
        ("DELETE", "/notifications/clear-all", {"params": {"recipientId": other.id}}),
    ):
        response = client.request(method, url, headers=headers, **kwargs)
        assert response.status_code == 403, url
        assert response.json() == {"success": False, "message": "无权访问其他用户的通知"}


def test_limit_and_unread_only(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")
    seeded = _seed(student.id, 3)
    with SessionLocal() as session:
        NotificationRepository(session).mark_as_read(seeded[0].id)
    headers = login("zhangsan")

    limited = client.get("/notifications", params={"limit": 1}, headers=headers)
    assert [item["id"] for item in limited.json()["data"]] == [seeded[2].id]

    unread = client.get("/notifications", params={"unreadOnly": "true"}, headers=headers)
    assert {item["id"] for item in unread.json()["data"]} == {seeded[1].id, seeded[2].id}

    count = client.get("/notifications/unread-count", headers=headers)
    assert count.json() == {"success": True, "data": {"count": 2}, "message": None}


def test_mark_single_notification_read(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")
    notification = _seed(student.id)[0]
    headers = login("zhangsan")

    first = client.put(f"/notifications/{notification.id}/read", headers=headers)
    assert first.status_code == 200
    data = first.json()["data"]
    assert data["is_read"] is True
    assert data["read_at"] is not None

    again = client.put(f"/notifications/{notification.id}/read", headers=headers)
    assert again.status_code == 200
    assert again.json()["data"]["read_at"] == data["read_at"]


def test_mark_read_unknown_id_is_404(client: TestClient, make_user, login) -> None:
    make_user("zhangsan")

    response = client.put("/notifications/4242/read", headers=login("zhangsan"))

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "通知不存在"}


def test_mark_read_of_foreign_notification_is_403(
    client: TestClient, make_user, login
) -> None:
    make_user("zhangsan")
    other = make_user("lisi")
    notification = _seed(other.id)[0]

    response = client.put(f"/notifications/{notification.id}/read", headers=login("zhangsan"))

    assert response.status_code == 403
    with SessionLocal() as session:
        assert NotificationRepository(session).get(notification.id).is_read is False


def test_mark_all_read_returns_flipped_count(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")
    other = make_user("lisi")
    _seed(student.id, 3)
    _seed(other.id, 1)
    headers = login("zhangsan")

    response = client.put(
        "/notifications/mark-all-read", json={"recipientId": student.id}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["data"] == {"count": 3}

    repeat = client.put("/notifications/mark-all-read", headers=headers)
    assert repeat.json()["data"] == {"count": 0}

    with SessionLocal() as session:
        assert NotificationRepository(session).count_unread(other.id) == 1


def test_clear_all_is_idempotent(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")
    other = make_user("lisi")
    _seed(student.id, 2)
    _seed(other.id, 1)
    headers = login("zhangsan")

    first = client.delete(
        "/notifications/clear-all", params={"recipientId": student.id}, headers=headers
    )
    assert first.json()["data"] == {"count": 2}
    second = client.delete(
        "/notifications/clear-all", params={"recipientId": student.id}, headers=headers
    )
    assert second.json()["data"] == {"count": 0}
    assert client.get("/notifications", headers=headers).json()["data"] == []

    with SessionLocal() as session:
        assert len(NotificationRepository(session).list_for_recipient(other.id)) == 1


def test_admin_creates_notification_from_template(client: TestClient, make_user, login) -> None:
    admin = make_user("root", role=ROLE_ADMIN)
    student = make_user("zhangsan")

    response = client.post(
        "/notifications",
        json={
            "type": "course_enrollment",
            "recipientId": student.id,
            "data": {"studentName": "张三", "courseName": "Web开发基础"},
            "relatedType": "course",
            "relatedId": 17,
        },
        headers=login("root"),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert "张三" in data["message"]
    assert "Web开发基础" in data["message"]
    assert data["sender_id"] == admin.id
    assert data["related_id"] == 17


def test_non_admin_cannot_create_notifications(client: TestClient, make_user, login) -> None:
    student = make_user("zhangsan")

    response = client.post(
        "/notifications",
        json={"type": "course_enrollment", "recipientId": student.id},
        headers=login("zhangsan"),
    )

    assert response.status_code == 403


def test_create_requires_type(client: TestClient, make_user, login) -> None:
    make_user("root", role=ROLE_ADMIN)

    response = client.post("/notifications", json={"recipientId": 1}, headers=login("root"))

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert "type" in body["message"]


def test_create_rejects_overlong_rendered_title(client: TestClient, make_user, login) -> None:
    make_user("root", role=ROLE_ADMIN)
    student = make_user("zhangsan")

    response = client.post(
        "/notifications",
        json={
            "type": "system_announcement",
            "recipientId": student.id,
            "data": {"title": "长" * (TITLE_MAX_LENGTH + 1), "content": "维护通知"},
        },
        headers=login("root"),
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    with SessionLocal() as session:
        assert NotificationRepository(session).list_for_recipient(student.id) == []


def test_announcement_is_delivered_in_background(
    client: TestClient, make_user, login
) -> None:
    make_user("root", role=ROLE_ADMIN)
    teacher = make_user("liwei", role=ROLE_TEACHER)
    student = make_user("zhangsan")

    response = client.post(
        "/notifications/announcements",
        json={
            "title": "系统维护",
            "message": "今晚 22:00 进行系统维护",
            "recipientIds": [teacher.id, student.id, student.id],
        },
        headers=login("root"),
    )

    assert response.status_code == 202
    assert response.json()["data"] == {"count": 2}
    with SessionLocal() as session:
        repository = NotificationRepository(session)
        for recipient_id in (teacher.id, student.id):
            (notification,) = repository.list_for_recipient(recipient_id)
            assert notification.title == "系统维护"
            assert notification.priority == "urgent"


def test_storage_failure_returns_generic_500(
    client: TestClient, make_user, login, monkeypatch
) -> None:
    make_user("zhangsan")
    headers = login("zhangsan")

    def _broken(self, *args, **kwargs):
        raise StorageError("Failed to list notifications")

    monkeypatch.setattr(NotificationRepository, "list_for_recipient", _broken)

    response = client.get("/notifications", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "服务器内部错误，请稍后重试"}
