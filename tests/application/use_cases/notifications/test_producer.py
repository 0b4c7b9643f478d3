"""Tests for template rendering and notification fan-out."""

from __future__ import annotations

import pytest

from classroom.application.use_cases.notifications import Delivery, NotificationProducer
from classroom.application.use_cases.notifications.templates import (
    AUDIENCE_TEACHER,
    GENERIC_TEMPLATE,
    get_template,
    render,
)
from classroom.domain.exceptions import StorageError, ValidationError
from classroom.infrastructure.repositories import NotificationRepository


def test_course_enrollment_message_substitutes_values(session) -> None:
    notification = NotificationProducer(session).produce(
        "course_enrollment",
        7,
        {"studentName": "张三", "courseName": "Web开发基础"},
    )

    assert "张三" in notification.message
    assert "Web开发基础" in notification.message
    assert "{" not in notification.message
    assert notification.title == "选课成功"
    assert notification.recipient_id == 7
    assert notification.is_read is False


def test_unknown_type_falls_back_to_generic_text(session) -> None:
    notification = NotificationProducer(session).produce("mystery_event", 3, {"x": 1})

    assert notification.type == "mystery_event"
    assert notification.title == GENERIC_TEMPLATE.title
    assert notification.message == GENERIC_TEMPLATE.message
    assert notification.priority == "normal"


def test_explicit_text_overrides_template(session) -> None:
    notification = NotificationProducer(session).produce(
        "course_enrollment",
        7,
        {"studentName": "张三", "courseName": "Web开发基础"},
        title="自定义标题",
        message="自定义内容",
    )

    assert notification.title == "自定义标题"
    assert notification.message == "自定义内容"


@pytest.mark.parametrize(
    ("notification_type", "expected"),
    [
        ("course_assignment", "high"),
        ("grade_assigned", "high"),
        ("system_announcement", "urgent"),
        ("course_enrollment", "normal"),
        ("user_registration", "normal"),
    ],
)
def test_default_priority_per_type(session, notification_type: str, expected: str) -> None:
    notification = NotificationProducer(session).produce(
        notification_type, 5, {"title": "t", "content": "c"}
    )

    assert notification.priority == expected


def test_produce_requires_type_and_recipient(session) -> None:
    producer = NotificationProducer(session)

    with pytest.raises(ValidationError):
        producer.produce("", 1)
    with pytest.raises(ValidationError):
        producer.produce("course_enrollment", None)


def test_producer_does_not_deduplicate(session) -> None:
    producer = NotificationProducer(session)
    data = {"studentName": "张三", "courseName": "Web开发基础"}

    producer.produce("course_enrollment", 7, data)
    producer.produce("course_enrollment", 7, data)

    assert len(NotificationRepository(session).list_for_recipient(7)) == 2


def test_missing_placeholders_render_empty() -> None:
    assert render("学生 {studentName} 选择了《{courseName}》", {"studentName": "李四"}) == (
        "学生 李四 选择了《》"
    )


def test_teacher_audience_has_its_own_wording() -> None:
    student = get_template("course_enrollment")
    teacher = get_template("course_enrollment", AUDIENCE_TEACHER)

    assert student != teacher
    assert get_template("grade_assigned", AUDIENCE_TEACHER) == get_template("grade_assigned")


def test_fan_out_isolates_failing_recipient(session, monkeypatch) -> None:
    producer = NotificationProducer(session)
    original_create = NotificationRepository.create

    def _flaky_create(self, notification):
        if notification.recipient_id == 8:
            raise StorageError("Failed to insert notification")
        return original_create(self, notification)

    monkeypatch.setattr(NotificationRepository, "create", _flaky_create)

    saved = producer.fan_out(
        [
            Delivery(type="system_announcement", recipient_id=recipient_id,
                     template_data={"title": "维护", "content": "今晚维护"})
            for recipient_id in (7, 8, 9)
        ]
    )

    assert [notification.recipient_id for notification in saved] == [7, 9]
    assert len(NotificationRepository(session).list_for_recipient(None)) == 2
