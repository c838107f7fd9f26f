import pytest
from sqlalchemy.orm import sessionmaker

from setukpa.core.config import settings
from setukpa.core.exceptions import NotFoundError
from setukpa.models.enums import NotificationType
from setukpa.models.notification import Notification
from setukpa.models.paper import Chapter
from setukpa.services import notification_service, paper_service
from setukpa.workers import queue, tasks


def test_notify_builds_payload(sent_notifications):
    job_id = notification_service.notify(
        5, NotificationType.PAPER_GRADED, "Nilai diperbarui", "Nilai akhir: 80", related_id=3
    )
    assert job_id == "job-1"
    assert sent_notifications == [
        {
            "user_id": 5,
            "type": "PAPER_GRADED",
            "title": "Nilai diperbarui",
            "message": "Nilai akhir: 80",
            "related_id": 3,
        }
    ]


def test_notify_without_recipient_is_skipped(sent_notifications):
    assert notification_service.notify(None, NotificationType.PAPER_SUBMITTED, "t", "m") is None
    assert sent_notifications == []


def test_notify_disabled(monkeypatch, sent_notifications):
    monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", False)
    assert notification_service.notify(1, NotificationType.PAPER_SUBMITTED, "t", "m") is None
    assert sent_notifications == []


def test_queue_failure_does_not_undo_the_change(monkeypatch, db_session, paper, student):
    def broken_enqueue(payload):
        raise ConnectionError("redis down")

    monkeypatch.setattr(
        "setukpa.services.notification_service.enqueue_notification_task", broken_enqueue
    )

    submitted = paper_service.submit_chapter(
        db_session, paper_id=paper.id, chapter_index=0, version=1, user=student
    )
    assert submitted.status == "SUBMITTED"

    db_session.expire_all()
    assert db_session.query(Chapter).get(submitted.id).status == "SUBMITTED"


def test_notification_task_goes_to_notification_queue(monkeypatch):
    calls = []

    def fake_enqueue_job(func, *args, queue_name="default", **kwargs):
        calls.append((func, args, queue_name, kwargs.get("retries")))
        return "job-42"

    monkeypatch.setattr(queue, "enqueue_job", fake_enqueue_job)

    payload = {"user_id": 1, "type": "PAPER_SUBMITTED", "title": "t", "message": "m"}
    assert queue.enqueue_notification_task(payload) == "job-42"
    assert calls == [(tasks.notification_task, (payload,), "notifications", 3)]


@pytest.fixture
def worker_sessions(monkeypatch, engine):
    monkeypatch.setattr(
        tasks, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )


def test_notification_task_persists_row(worker_sessions, db_session, student):
    result = tasks.notification_task(
        {
            "user_id": student.id,
            "type": "CHAPTER_REVIEWED",
            "title": "Hasil review bab",
            "message": "'BAB I' disetujui",
            "related_id": 9,
        }
    )
    assert result["status"] == "success"

    stored = db_session.query(Notification).get(result["notification_id"])
    assert stored.user_id == student.id
    assert stored.type == "CHAPTER_REVIEWED"
    assert stored.related_id == 9
    assert stored.is_read is False


def test_notification_task_reports_unknown_user(worker_sessions, db_session):
    result = tasks.notification_task(
        {"user_id": 999, "type": "PAPER_GRADED", "title": "t", "message": "m"}
    )
    assert result["status"] == "error"
    assert db_session.query(Notification).count() == 0


def test_list_and_mark_read(db_session, student, advisor):
    for title in ("satu", "dua"):
        notification_service.create_notification(
            db_session, user_id=student.id, type="PAPER_GRADED", title=title, message="m"
        )
    notification_service.create_notification(
        db_session, user_id=advisor.id, type="PAPER_SUBMITTED", title="lain", message="m"
    )

    mine = notification_service.list_notifications_for_user(db_session, user=student)
    assert [n.title for n in mine] == ["dua", "satu"]

    read = notification_service.mark_read(db_session, user=student, notification_id=mine[0].id)
    assert read.is_read is True
    unread = notification_service.list_notifications_for_user(db_session, user=student, unread_only=True)
    assert [n.title for n in unread] == ["satu"]


def test_cannot_mark_someone_elses_notification(db_session, student, advisor):
    notification = notification_service.create_notification(
        db_session, user_id=advisor.id, type="PAPER_SUBMITTED", title="t", message="m"
    )
    with pytest.raises(NotFoundError):
        notification_service.mark_read(db_session, user=student, notification_id=notification.id)


def test_create_notification_for_missing_user(db_session):
    with pytest.raises(NotFoundError):
        notification_service.create_notification(
            db_session, user_id=404, type="PAPER_GRADED", title="t", message="m"
        )
