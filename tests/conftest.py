"""Shared fixtures: a throwaway SQLite database and helpers to create users."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "classroom_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["APP_TIMEZONE"] = "Asia/Shanghai"

from classroom.config import get_settings  # noqa: E402

get_settings.cache_clear()

from classroom.application.use_cases.users import create_user  # noqa: E402
from classroom.domain.entities import ROLE_STUDENT, User  # noqa: E402
from classroom.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)

DEFAULT_PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Create users through the regular use case with a known password."""

    def _make_user(
        username: str,
        *,
        role: str = ROLE_STUDENT,
        full_name: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        with SessionLocal() as db:
            return create_user(
                db,
                username=username,
                password=password,
                full_name=full_name or username,
                role=role,
            )

    return _make_user
