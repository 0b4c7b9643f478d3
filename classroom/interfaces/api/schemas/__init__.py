from .auth import SessionUser, Token
from .common import CountRead, Envelope, ErrorResponse
from .notification import (
    AnnouncementCreate,
    NotificationCreate,
    NotificationMarkAllReadRequest,
    NotificationRead,
)
from .user import UserRead, UserRegister

__all__ = [
    "AnnouncementCreate",
    "CountRead",
    "Envelope",
    "ErrorResponse",
    "NotificationCreate",
    "NotificationMarkAllReadRequest",
    "NotificationRead",
    "SessionUser",
    "Token",
    "UserRead",
    "UserRegister",
]
