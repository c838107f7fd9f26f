"""
Shared fixtures: an in-memory SQLite database, one user per role and a
recorder standing in for the notification queue.
"""

import os

# must be set before setukpa.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from setukpa.db.base import Base
from setukpa.models.assignment import Assignment, PaperTemplate
from setukpa.models.enums import Role
from setukpa.models.user import Batch, ExaminerAssignment, User
from setukpa.services import paper_service

TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch):
    """Collects payloads instead of pushing them to Redis."""
    sent = []

    def fake_enqueue(payload):
        sent.append(payload)
        return f"job-{len(sent)}"

    monkeypatch.setattr(
        "setukpa.services.notification_service.enqueue_notification_task", fake_enqueue
    )
    return sent


def _user(db, email, role, **kwargs):
    user = User(
        email=email,
        # Pre-hashed password to avoid running bcrypt in tests
        password_hash="$2b$12$hashed_password_001",
        name=email.split("@")[0].title(),
        role=role.value,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def batch(db_session):
    batch = Batch(name="Angkatan 1")
    db_session.add(batch)
    db_session.commit()
    db_session.refresh(batch)
    return batch


@pytest.fixture
def other_batch(db_session):
    batch = Batch(name="Angkatan 2")
    db_session.add(batch)
    db_session.commit()
    db_session.refresh(batch)
    return batch


@pytest.fixture
def admin(db_session):
    return _user(db_session, "admin@setukpa.ac.id", Role.ADMIN)


@pytest.fixture
def advisor(db_session):
    return _user(db_session, "pembimbing@setukpa.ac.id", Role.PEMBIMBING)


@pytest.fixture
def other_advisor(db_session):
    return _user(db_session, "pembimbing2@setukpa.ac.id", Role.PEMBIMBING)


@pytest.fixture
def examiner(db_session, student):
    examiner = _user(db_session, "penguji@setukpa.ac.id", Role.PENGUJI)
    db_session.add(ExaminerAssignment(examiner_id=examiner.id, student_id=student.id))
    db_session.commit()
    return examiner


@pytest.fixture
def second_examiner(db_session, student):
    examiner = _user(db_session, "penguji2@setukpa.ac.id", Role.PENGUJI)
    db_session.add(ExaminerAssignment(examiner_id=examiner.id, student_id=student.id))
    db_session.commit()
    return examiner


@pytest.fixture
def student(db_session, batch, advisor):
    return _user(
        db_session,
        "siswa@setukpa.ac.id",
        Role.SISWA,
        nosis="S-001",
        batch_id=batch.id,
        pembimbing_id=advisor.id,
    )


@pytest.fixture
def other_student(db_session, other_batch):
    return _user(db_session, "siswa2@setukpa.ac.id", Role.SISWA, batch_id=other_batch.id)


@pytest.fixture
def template(db_session):
    template = PaperTemplate(
        name="Naskah Karya Perorangan",
        pages=[
            {"name": "Sampul", "type": "COVER"},
            {
                "name": "Isi",
                "type": "CONTENT",
                "structure": [
                    {"title": "BAB I: PENDAHULUAN", "minWords": 300},
                    {
                        "title": "BAB II: PEMBAHASAN",
                        "minWords": 1000,
                        "subsections": [{"title": "A", "minWords": 200}],
                    },
                    {"title": "BAB III: PENUTUP", "minWords": 200},
                ],
            },
        ],
    )
    db_session.add(template)
    db_session.commit()
    db_session.refresh(template)
    return template


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def assignment(db_session, template, now):
    assignment = Assignment(
        title="Karya Tulis Perorangan",
        subject="Kepemimpinan",
        activation_date=now - timedelta(days=7),
        deadline=now + timedelta(days=30),
        template_id=template.id,
    )
    db_session.add(assignment)
    db_session.commit()
    db_session.refresh(assignment)
    return assignment


@pytest.fixture
def paper(db_session, student, assignment):
    return paper_service.create_paper(db_session, student=student, assignment=assignment)


def approve_all(db, paper, student, advisor):
    """Submit and approve every chapter of a paper."""
    for index, chapter in enumerate(list(paper.chapters)):
        submitted = paper_service.submit_chapter(
            db, paper_id=paper.id, chapter_index=index, version=chapter.version, user=student
        )
        paper_service.review_chapter(
            db,
            paper_id=paper.id,
            chapter_index=index,
            decision="APPROVED",
            version=submitted.version,
            user=advisor,
        )
    db.refresh(paper)
    return paper
