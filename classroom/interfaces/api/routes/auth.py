"""Endpoints for exchanging credentials for an access token."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from classroom.application.use_cases.users import AuthenticationStatus, authenticate_user
from classroom.config import get_settings
from classroom.infrastructure.database import get_db
from classroom.infrastructure.security import create_access_token, password_signature
from classroom.interfaces.api.schemas import SessionUser, Token

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()
logger = logging.getLogger(__name__)


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Authenticate by username and return a JWT plus the session identity."""

    user, auth_status = authenticate_user(db, form_data.username, form_data.password)

    if auth_status is AuthenticationStatus.INVALID_CREDENTIALS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户名或密码错误",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if auth_status is AuthenticationStatus.INACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="用户已停用",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={
            "sub": user.username,
            "role": user.role,
            "pwd_sig": password_signature(user.password, user.is_active),
        },
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    logger.info("User %s signed in", user.username)
    return Token(
        access_token=access_token,
        token_type="bearer",
        user=SessionUser.model_validate(user),
    )
