"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from classroom.domain.entities import User
from classroom.infrastructure.models import UserModel
from classroom.utils import ensure_app_naive_datetime, now_in_app_naive_datetime


class UserRepository:
    """Provide the user lookups needed by authentication and notifications."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_username(self, username: str) -> User | None:
        model = self.session.query(UserModel).filter_by(username=username).first()
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            username=user.username,
            email=user.email,
            password=user.password,
            full_name=user.full_name,
            role=user.role,
            is_active=user.is_active,
            created_at=ensure_app_naive_datetime(user.created_at)
            or now_in_app_naive_datetime(),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_active_ids_by_role(self, role: str) -> list[int]:
        query = (
            self.session.query(UserModel.id)
            .filter(UserModel.role == role)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
        )
        return [user_id for (user_id,) in query.all()]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            password=model.password,
            full_name=model.full_name,
            role=model.role,
            is_active=model.is_active,
            created_at=model.created_at,
        )


__all__ = ["UserRepository"]
