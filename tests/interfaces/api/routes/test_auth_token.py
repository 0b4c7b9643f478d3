"""Tests for the authentication token endpoint."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from classroom.domain.entities import ROLE_TEACHER
from classroom.infrastructure.database import SessionLocal
from classroom.infrastructure.models import UserModel
from classroom.infrastructure.security import get_password_hash
from main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


def _login(client: TestClient, username: str, password: str = "Secret123"):
    return client.post("/auth/token", data={"username": username, "password": password})


def test_login_returns_token_and_session_identity(client: TestClient, make_user) -> None:
    teacher = make_user("liwei", role=ROLE_TEACHER, full_name="李老师")

    response = _login(client, "liwei")

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["user"] == {
        "id": teacher.id,
        "username": "liwei",
        "full_name": "李老师",
        "role": "teacher",
    }


def test_login_rejects_bad_password(client: TestClient, make_user) -> None:
    make_user("zhangsan")

    response = _login(client, "zhangsan", "wrong-password")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "用户名或密码错误"}


def test_login_rejects_inactive_user(client: TestClient, make_user) -> None:
    user = make_user("zhangsan")
    with SessionLocal() as session:
        session.query(UserModel).filter_by(id=user.id).update({"is_active": False})
        session.commit()

    response = _login(client, "zhangsan")

    assert response.status_code == 403
    assert response.json()["success"] is False


def test_token_dies_after_password_change(client: TestClient, make_user) -> None:
    make_user("zhangsan")
    token = _login(client, "zhangsan").json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/users/me", headers=headers).status_code == 200

    with SessionLocal() as session:
        session.query(UserModel).filter_by(username="zhangsan").update(
            {"password": get_password_hash("NewSecret456")}
        )
        session.commit()

    response = client.get("/users/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_missing_token_is_rejected(client: TestClient) -> None:
    response = client.get("/notifications")

    assert response.status_code == 401
    assert response.json()["success"] is False
