"""
Assignment visibility and paper distribution.

An assignment applies to a student when it has no batch or the student's
batch. Without a paper the reported status comes from the clock:

    now < activation_date             -> SCHEDULED
    activation_date <= now <= deadline -> AVAILABLE
    now > deadline                     -> MISSED

A missing activation date means "already active", a missing deadline means
"never missed". Once a paper exists its own state is reported instead.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from setukpa.core import permissions
from setukpa.core.exceptions import (
    DanglingReferenceError,
    DuplicatePaperError,
    InvalidTransitionError,
    NotFoundError,
)
from setukpa.models.assignment import Assignment
from setukpa.models.enums import AssignmentStatus, ChapterStatus, ContentApprovalStatus, Role
from setukpa.models.paper import Paper
from setukpa.models.user import User
from setukpa.services import grading_service, paper_service
from setukpa.services.grade_aggregation import FinalScore

logger = logging.getLogger(__name__)


class AssignmentState(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    AVAILABLE = "AVAILABLE"
    MISSED = "MISSED"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    GRADED = "GRADED"


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_applicable(assignment: Assignment, student: User) -> bool:
    return assignment.batch_id is None or assignment.batch_id == student.batch_id


def time_status(assignment: Assignment, now: Optional[datetime] = None) -> AssignmentState:
    now = _aware(now) or datetime.now(timezone.utc)
    activation = _aware(assignment.activation_date)
    deadline = _aware(assignment.deadline)

    if activation is not None and now < activation:
        return AssignmentState.SCHEDULED
    if deadline is not None and now > deadline:
        return AssignmentState.MISSED
    return AssignmentState.AVAILABLE


def paper_status(paper: Paper, final_score: Optional[FinalScore] = None) -> AssignmentState:
    if final_score is not None and final_score.is_graded:
        return AssignmentState.GRADED
    if paper.content_approval_status == ContentApprovalStatus.APPROVED.value:
        return AssignmentState.APPROVED
    return AssignmentState.IN_PROGRESS


def resolve_status(
    assignment: Assignment,
    paper: Optional[Paper] = None,
    now: Optional[datetime] = None,
    final_score: Optional[FinalScore] = None,
) -> AssignmentState:
    if paper is not None:
        return paper_status(paper, final_score)
    return time_status(assignment, now)


def check_reference(paper: Paper, assignment: Optional[Assignment]) -> Assignment:
    if assignment is None:
        raise DanglingReferenceError("Paper", paper.id, "Assignment", paper.assignment_id)
    return assignment


def _chapter_progress(paper: Optional[Paper]) -> tuple[int, int]:
    if paper is None:
        return 0, 0
    approved = sum(1 for c in paper.chapters if c.status == ChapterStatus.APPROVED.value)
    return approved, len(paper.chapters)


def list_for_student(
    db: Session,
    *,
    student: User,
    now: Optional[datetime] = None,
) -> List[dict]:
    """
    One entry per published assignment visible to the student, plus one
    error entry per paper whose assignment has been deleted.
    """
    entries: List[dict] = []
    assignments = (
        db.query(Assignment)
        .filter(Assignment.status != AssignmentStatus.DRAFT.value)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )
    papers = {p.assignment_id: p for p in paper_service.list_papers(db, student_id=student.id, limit=None)}

    for assignment in assignments:
        if not is_applicable(assignment, student):
            continue
        paper = papers.pop(assignment.id, None)
        final = grading_service.compute_for_paper(db, paper) if paper is not None else None
        progress, total = _chapter_progress(paper)
        entries.append(
            {
                "assignment_id": assignment.id,
                "title": assignment.title,
                "subject": assignment.subject,
                "deadline": assignment.deadline,
                "status": resolve_status(assignment, paper, now, final).value,
                "paper_id": paper.id if paper is not None else None,
                "progress": progress,
                "total_chapters": total,
            }
        )

    # leftovers: papers of unpublished or deleted assignments
    for assignment_id, paper in papers.items():
        try:
            check_reference(paper, db.query(Assignment).get(assignment_id))
        except DanglingReferenceError as e:
            logger.warning(f"Student {student.id}: {e.message}")
            entries.append(
                {
                    "assignment_id": assignment_id,
                    "title": paper.title,
                    "subject": paper.subject,
                    "status": "ERROR",
                    "paper_id": paper.id,
                    "error": e.to_dict(),
                }
            )
    return entries


def open_paper(
    db: Session,
    *,
    student: User,
    assignment_id: int,
    now: Optional[datetime] = None,
) -> Paper:
    """Return the student's paper for an assignment, creating it on first access."""
    permissions.require(student.role, "open_paper")
    assignment = db.query(Assignment).get(assignment_id)
    if assignment is None or not is_applicable(assignment, student):
        raise NotFoundError("Assignment", assignment_id)

    existing = paper_service.find_paper(db, assignment_id=assignment.id, student_id=student.id)
    if existing is not None:
        return existing

    state = time_status(assignment, now)
    if assignment.status == AssignmentStatus.DRAFT.value or state == AssignmentState.SCHEDULED:
        raise InvalidTransitionError(state.value, AssignmentState.IN_PROGRESS.value, message="Tugas belum dibuka")
    if state == AssignmentState.MISSED:
        raise InvalidTransitionError(state.value, AssignmentState.IN_PROGRESS.value, message="Batas waktu tugas sudah lewat")

    paper = paper_service.create_paper(db, student=student, assignment=assignment)
    logger.info(f"Student {student.id} started paper {paper.id} for assignment {assignment.id}")
    return paper


def distribute_papers(db: Session, *, assignment: Assignment) -> dict:
    """Pre-provision a paper for every applicable student that has none yet."""
    query = db.query(User).filter(User.role == Role.SISWA.value)
    if assignment.batch_id is not None:
        query = query.filter(User.batch_id == assignment.batch_id)
    students = query.all()

    existing_ids = {
        student_id
        for (student_id,) in db.query(Paper.student_id).filter(Paper.assignment_id == assignment.id)
    }

    created = 0
    for student in students:
        if student.id in existing_ids:
            continue
        try:
            paper_service.create_paper(db, student=student, assignment=assignment)
        except DuplicatePaperError as e:
            # the student opened the paper concurrently
            logger.info(f"Skipping student {student.id} for assignment {assignment.id}: {e.message}")
            continue
        created += 1

    logger.info(
        f"Distributed assignment {assignment.id}: {created} created, "
        f"{len(existing_ids)} already present"
    )
    return {
        "assignment_id": assignment.id,
        "created": created,
        "already_present": len(existing_ids),
    }
