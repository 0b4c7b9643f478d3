"""Routes for self-registration and the current session's profile."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from classroom.application.use_cases.notifications import (
    notify_user_registered,
    schedule_notification_task,
)
from classroom.application.use_cases.users import create_user as create_user_uc
from classroom.domain.entities import ROLE_STUDENT, ROLE_TEACHER, User
from classroom.infrastructure.database import get_db
from classroom.interfaces.api.dependencies import get_current_active_user
from classroom.interfaces.api.schemas import Envelope, UserRead, UserRegister

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

_DUPLICATE_USERNAME = "用户名已存在"


def _to_read_model(user: User) -> UserRead:
    return UserRead.model_validate(user)


@router.post(
    "/register",
    response_model=Envelope[UserRead],
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    user_in: UserRegister,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Create a student or teacher account and queue the welcome notifications."""

    try:
        user = create_user_uc(
            db,
            username=user_in.username,
            password=user_in.password,
            full_name=user_in.full_name,
            role=user_in.role,
            email=user_in.email,
            allowed_roles=(ROLE_STUDENT, ROLE_TEACHER),
        )
    except ValueError as exc:
        detail = str(exc)
        status_code = (
            status.HTTP_409_CONFLICT
            if detail == _DUPLICATE_USERNAME
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=status_code, detail=detail) from exc

    logger.info("Registered %s %s", user.role, user.username)
    schedule_notification_task(background_tasks, notify_user_registered, user=user)
    return Envelope(data=_to_read_model(user), message="注册成功")


@router.get("/me", response_model=Envelope[UserRead])
def read_current_user(current_user: User = Depends(get_current_active_user)):
    """Return the authenticated user."""

    return Envelope(data=_to_read_model(current_user))
