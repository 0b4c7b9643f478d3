"""Errors raised by the notification subsystem."""


class NotificationError(Exception):
    """Base class for notification related failures."""


class ValidationError(NotificationError):
    """A required field is missing or holds an unsupported value."""


class NotFoundError(NotificationError):
    """The referenced record does not exist."""


class PermissionDeniedError(NotificationError):
    """The caller may not act on behalf of the requested recipient."""


class StorageError(NotificationError):
    """The relational store rejected the operation or is unreachable."""


class NetworkError(NotificationError):
    """A feed request from the client failed or timed out."""


__all__ = [
    "NotificationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "StorageError",
    "NetworkError",
]
