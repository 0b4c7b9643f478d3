"""Message templates used to render notification text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from string import Formatter
from typing import Any, Final, Mapping

from classroom.domain.entities import (
    NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION,
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT,
    NOTIFICATION_TYPE_COURSE_ENROLLMENT,
    NOTIFICATION_TYPE_GRADE_ASSIGNED,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT,
    NOTIFICATION_TYPE_USER_REGISTRATION,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
)

logger = logging.getLogger(__name__)

AUDIENCE_RECIPIENT: Final[str] = "recipient"
AUDIENCE_TEACHER: Final[str] = "teacher"
AUDIENCE_ADMIN: Final[str] = "admin"


@dataclass(frozen=True)
class MessageTemplate:
    """Title and message patterns with ``{placeholder}`` fields."""

    title: str
    message: str


GENERIC_TEMPLATE: Final[MessageTemplate] = MessageTemplate(
    title="新通知",
    message="您有一条新通知",
)

_TEMPLATES: Final[dict[tuple[str, str], MessageTemplate]] = {
    (NOTIFICATION_TYPE_USER_REGISTRATION, AUDIENCE_RECIPIENT): MessageTemplate(
        title="欢迎加入",
        message="{fullName}，欢迎加入编程学习平台！您的账号 {username} 已创建成功。",
    ),
    (NOTIFICATION_TYPE_USER_REGISTRATION, AUDIENCE_ADMIN): MessageTemplate(
        title="新用户注册",
        message="新{roleLabel} {fullName}（{username}）注册了平台账号。",
    ),
    (NOTIFICATION_TYPE_COURSE_ASSIGNMENT, AUDIENCE_RECIPIENT): MessageTemplate(
        title="新作业发布",
        message="课程《{courseName}》发布了新作业《{assignmentTitle}》，请按时完成。",
    ),
    (NOTIFICATION_TYPE_ASSIGNMENT_SUBMISSION, AUDIENCE_RECIPIENT): MessageTemplate(
        title="新的作业提交",
        message="学生 {studentName} 提交了作业《{assignmentTitle}》。",
    ),
    (NOTIFICATION_TYPE_GRADE_ASSIGNED, AUDIENCE_RECIPIENT): MessageTemplate(
        title="作业已评分",
        message="您的作业《{assignmentTitle}》已评分，得分：{score}。",
    ),
    (NOTIFICATION_TYPE_COURSE_ENROLLMENT, AUDIENCE_RECIPIENT): MessageTemplate(
        title="选课成功",
        message="{studentName}，您已成功加入课程《{courseName}》，请及时查看课程内容。",
    ),
    (NOTIFICATION_TYPE_COURSE_ENROLLMENT, AUDIENCE_TEACHER): MessageTemplate(
        title="新学生选课",
        message="学生 {studentName} 选择了您的课程《{courseName}》。",
    ),
    (NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT, AUDIENCE_RECIPIENT): MessageTemplate(
        title="{title}",
        message="{content}",
    ),
}

_DEFAULT_PRIORITIES: Final[dict[str, str]] = {
    NOTIFICATION_TYPE_COURSE_ASSIGNMENT: PRIORITY_HIGH,
    NOTIFICATION_TYPE_GRADE_ASSIGNED: PRIORITY_HIGH,
    NOTIFICATION_TYPE_SYSTEM_ANNOUNCEMENT: PRIORITY_URGENT,
}

_FORMATTER = Formatter()


class _TemplateData(dict):
    """Mapping that renders unknown placeholders as empty strings."""

    def __missing__(self, key: str) -> str:
        logger.debug("Template placeholder %r has no value", key)
        return ""


def get_template(notification_type: str, audience: str = AUDIENCE_RECIPIENT) -> MessageTemplate:
    """Return the template for ``notification_type`` as seen by ``audience``.

    Unknown audiences fall back to the recipient wording and unknown types to
    :data:`GENERIC_TEMPLATE`.
    """

    template = _TEMPLATES.get((notification_type, audience))
    if template is None:
        template = _TEMPLATES.get((notification_type, AUDIENCE_RECIPIENT))
    return template or GENERIC_TEMPLATE


def render(pattern: str, data: Mapping[str, Any] | None) -> str:
    """Substitute ``{placeholder}`` fields in ``pattern`` with ``data`` values."""

    values = _TemplateData(
        {key: "" if value is None else value for key, value in (data or {}).items()}
    )
    return _FORMATTER.vformat(pattern, (), values).strip()


def default_priority(notification_type: str) -> str:
    return _DEFAULT_PRIORITIES.get(notification_type, PRIORITY_NORMAL)


__all__ = [
    "AUDIENCE_ADMIN",
    "AUDIENCE_RECIPIENT",
    "AUDIENCE_TEACHER",
    "GENERIC_TEMPLATE",
    "MessageTemplate",
    "default_priority",
    "get_template",
    "render",
]
