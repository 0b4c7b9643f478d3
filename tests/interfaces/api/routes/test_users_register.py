"""Tests for public registration and its background notifications."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from classroom.domain.entities import ROLE_ADMIN
from classroom.infrastructure.database import SessionLocal
from classroom.infrastructure.repositories import NotificationRepository
from main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


def _register(client: TestClient, **overrides):
    payload = {
        "username": "zhangsan",
        "password": "Secret123",
        "fullName": "张三",
        "role": "student",
    }
    payload.update(overrides)
    return client.post("/users/register", json=payload)


def test_register_creates_user_and_notifications(client: TestClient, make_user) -> None:
    admin = make_user("root", role=ROLE_ADMIN, full_name="管理员")

    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]
    assert user["username"] == "zhangsan"
    assert user["role"] == "student"
    assert user["email"] == "zhangsan@example.com"
    assert "password" not in user

    with SessionLocal() as session:
        repository = NotificationRepository(session)
        welcome = repository.list_for_recipient(user["id"])
        alerts = repository.list_for_recipient(admin.id)

    assert [notification.type for notification in welcome] == ["user_registration"]
    assert "张三" in welcome[0].message
    assert len(alerts) == 1
    assert alerts[0].sender_id == user["id"]


def test_register_rejects_duplicate_username(client: TestClient) -> None:
    assert _register(client).status_code == 201

    response = _register(client)

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "用户名已存在"}


def test_register_cannot_create_admins(client: TestClient) -> None:
    response = _register(client, role="admin")

    assert response.status_code == 422
    assert response.json()["success"] is False


def test_register_rejects_short_password(client: TestClient) -> None:
    response = _register(client, password="123")

    assert response.status_code == 400
    assert response.json()["message"] == "密码长度至少6位"


def test_me_returns_current_user(client: TestClient) -> None:
    _register(client)
    token = client.post(
        "/auth/token", data={"username": "zhangsan", "password": "Secret123"}
    ).json()["access_token"]

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["full_name"] == "张三"
