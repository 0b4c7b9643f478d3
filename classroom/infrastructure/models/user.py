"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import expression

from classroom.infrastructure.database import Base
from classroom.utils import now_in_app_naive_datetime


class UserModel(Base):
    """Database representation of a platform user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(120), nullable=False)
    password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["UserModel"]
