from datetime import timedelta
from types import SimpleNamespace

import pytest

from setukpa.core.exceptions import (
    DanglingReferenceError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from setukpa.models.assignment import Assignment
from setukpa.models.paper import Paper
from setukpa.schemas.grade import AdvisorGradeUpdate
from setukpa.services import distribution, grading_service, paper_service
from setukpa.services.distribution import AssignmentState
from tests.conftest import approve_all


def _assignment(now, activation=None, deadline=None, batch_id=None):
    return SimpleNamespace(
        activation_date=now + activation if activation is not None else None,
        deadline=now + deadline if deadline is not None else None,
        batch_id=batch_id,
    )


def test_batch_scoped_assignment_is_not_applicable_to_other_batch(now):
    assignment = _assignment(now, batch_id=1)
    assert not distribution.is_applicable(assignment, SimpleNamespace(batch_id=2))
    assert distribution.is_applicable(assignment, SimpleNamespace(batch_id=1))


def test_global_assignment_applies_to_everyone(now):
    assignment = _assignment(now, batch_id=None)
    assert distribution.is_applicable(assignment, SimpleNamespace(batch_id=None))
    assert distribution.is_applicable(assignment, SimpleNamespace(batch_id=7))


@pytest.mark.parametrize(
    "activation,deadline,expected",
    [
        (timedelta(days=1), timedelta(days=5), AssignmentState.SCHEDULED),
        (timedelta(days=-1), timedelta(days=5), AssignmentState.AVAILABLE),
        (timedelta(days=-5), timedelta(days=-1), AssignmentState.MISSED),
        (timedelta(0), timedelta(0), AssignmentState.AVAILABLE),
        (None, timedelta(days=1), AssignmentState.AVAILABLE),
        (None, None, AssignmentState.AVAILABLE),
        (timedelta(days=-30), None, AssignmentState.AVAILABLE),
        (None, timedelta(days=-1), AssignmentState.MISSED),
    ],
)
def test_time_status(now, activation, deadline, expected):
    assert distribution.resolve_status(_assignment(now, activation, deadline), None, now) == expected


def test_naive_datetimes_are_treated_as_utc(now):
    assignment = _assignment(now.replace(tzinfo=None), deadline=timedelta(hours=-1))
    assert distribution.time_status(assignment, now) == AssignmentState.MISSED


def test_existing_paper_overrides_clock(db_session, paper, assignment, now):
    late = now + timedelta(days=365)
    assert distribution.resolve_status(assignment, paper, late) == AssignmentState.IN_PROGRESS


def test_paper_states(db_session, paper, student, advisor, assignment, now):
    paper = approve_all(db_session, paper, student, advisor)
    assert distribution.resolve_status(assignment, paper, now) == AssignmentState.APPROVED

    grading_service.record_advisor_grade(
        db_session,
        paper_id=paper.id,
        advisor=advisor,
        obj_in=AdvisorGradeUpdate(content_score=25, structure_score=20, language_score=15, format_score=20),
    )
    final = grading_service.compute_for_paper(db_session, paper)
    assert distribution.resolve_status(assignment, paper, now, final) == AssignmentState.GRADED


def test_dangling_reference_is_reported(db_session, paper):
    with pytest.raises(DanglingReferenceError) as exc:
        distribution.check_reference(paper, None)
    assert exc.value.details["missing_id"] == paper.assignment_id


def test_list_for_student(db_session, student, other_batch, batch, now):
    past = Assignment(
        title="Lama", subject="S", activation_date=now - timedelta(days=30), deadline=now - timedelta(days=1)
    )
    future = Assignment(title="Nanti", subject="S", activation_date=now + timedelta(days=3))
    foreign = Assignment(title="Batch lain", subject="S", batch_id=other_batch.id)
    mine = Assignment(title="Batch saya", subject="S", batch_id=batch.id)
    draft = Assignment(title="Belum terbit", subject="S", status="DRAFT")
    db_session.add_all([past, future, foreign, mine, draft])
    db_session.commit()

    paper_service.create_paper(db_session, student=student, assignment=mine)

    entries = {e["title"]: e for e in distribution.list_for_student(db_session, student=student, now=now)}
    assert set(entries) == {"Lama", "Nanti", "Batch saya"}
    assert entries["Lama"]["status"] == "MISSED"
    assert entries["Lama"]["paper_id"] is None
    assert entries["Nanti"]["status"] == "SCHEDULED"
    assert entries["Batch saya"]["status"] == "IN_PROGRESS"
    assert entries["Batch saya"]["total_chapters"] == 2
    assert entries["Batch saya"]["progress"] == 0


def test_list_reports_deleted_assignment_without_crashing(db_session, student, paper, assignment, now):
    db_session.delete(assignment)
    db_session.commit()

    entries = distribution.list_for_student(db_session, student=student, now=now)
    assert len(entries) == 1
    assert entries[0]["status"] == "ERROR"
    assert entries[0]["paper_id"] == paper.id
    assert entries[0]["error"]["code"] == "DANGLING_REFERENCE"


def test_open_paper_creates_once(db_session, student, assignment, now):
    first = distribution.open_paper(db_session, student=student, assignment_id=assignment.id, now=now)
    second = distribution.open_paper(db_session, student=student, assignment_id=assignment.id, now=now)
    assert first.id == second.id
    assert db_session.query(Paper).count() == 1


def test_open_paper_respects_schedule(db_session, student, assignment, now):
    with pytest.raises(InvalidTransitionError):
        distribution.open_paper(
            db_session, student=student, assignment_id=assignment.id, now=now - timedelta(days=30)
        )
    with pytest.raises(InvalidTransitionError):
        distribution.open_paper(
            db_session, student=student, assignment_id=assignment.id, now=now + timedelta(days=60)
        )


def test_open_paper_outside_batch(db_session, other_student, batch, now):
    scoped = Assignment(title="Batch 1", subject="S", batch_id=batch.id)
    db_session.add(scoped)
    db_session.commit()
    with pytest.raises(NotFoundError):
        distribution.open_paper(db_session, student=other_student, assignment_id=scoped.id, now=now)
    with pytest.raises(NotFoundError):
        distribution.open_paper(db_session, student=other_student, assignment_id=9999, now=now)


def test_only_students_open_papers(db_session, advisor, assignment, now):
    with pytest.raises(PermissionDeniedError):
        distribution.open_paper(db_session, student=advisor, assignment_id=assignment.id, now=now)


def test_distribute_papers(db_session, student, other_student, batch, template):
    scoped = Assignment(title="Batch 1", subject="S", batch_id=batch.id, template_id=template.id)
    everyone = Assignment(title="Semua", subject="S")
    db_session.add_all([scoped, everyone])
    db_session.commit()

    result = distribution.distribute_papers(db_session, assignment=scoped)
    assert result["created"] == 1
    assert result["already_present"] == 0
    paper = paper_service.find_paper(db_session, assignment_id=scoped.id, student_id=student.id)
    assert len(paper.chapters) == 3
    assert paper_service.find_paper(db_session, assignment_id=scoped.id, student_id=other_student.id) is None

    result = distribution.distribute_papers(db_session, assignment=everyone)
    assert result["created"] == 2

    # idempotent
    again = distribution.distribute_papers(db_session, assignment=everyone)
    assert again["created"] == 0
    assert again["already_present"] == 2
