"""Run notification handlers after the HTTP response has been sent."""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from classroom.infrastructure.database import SessionLocal

logger = logging.getLogger(__name__)

NotificationHandler = Callable[..., Any]


def run_notification_task(handler: NotificationHandler, /, **kwargs: Any) -> None:
    """Execute ``handler`` with a dedicated session, logging any failure.

    The request session is already closed when background tasks run, so each
    task opens and closes its own.
    """

    session: Session = SessionLocal()
    try:
        handler(session, **kwargs)
    except Exception:  # pragma: no cover
        logger.exception("Notification task %s failed", getattr(handler, "__name__", handler))
    finally:
        session.close()


def schedule_notification_task(
    background_tasks: BackgroundTasks, handler: NotificationHandler, /, **kwargs: Any
) -> None:
    """Queue ``handler`` to run once the triggering request has completed."""

    background_tasks.add_task(run_notification_task, handler, **kwargs)


__all__ = ["run_notification_task", "schedule_notification_task"]
