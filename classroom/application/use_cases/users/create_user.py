"""Use case for creating users."""

from sqlalchemy.orm import Session

from classroom.domain.entities import ROLES, User
from classroom.infrastructure.repositories import UserRepository
from classroom.infrastructure.security import get_password_hash
from classroom.utils import now_in_app_timezone

MIN_PASSWORD_LENGTH = 6


def create_user(
    session: Session,
    *,
    username: str,
    password: str,
    full_name: str,
    role: str,
    email: str | None = None,
    allowed_roles: tuple[str, ...] = ROLES,
) -> User:
    """Create a new user ensuring unique usernames."""

    repository = UserRepository(session)

    username = username.strip()
    if not username or not full_name.strip():
        raise ValueError("缺少必要参数")
    if role not in allowed_roles:
        raise ValueError("无效的用户角色")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"密码长度至少{MIN_PASSWORD_LENGTH}位")
    if repository.get_by_username(username):
        raise ValueError("用户名已存在")

    user = User(
        id=None,
        username=username,
        email=email or f"{username}@example.com",
        password=get_password_hash(password),
        full_name=full_name.strip(),
        role=role,
        is_active=True,
        created_at=now_in_app_timezone(),
    )
    return repository.create(user)
