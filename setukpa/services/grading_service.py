# setukpa/services/grading_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from setukpa.core import permissions
from setukpa.core.exceptions import PermissionDeniedError
from setukpa.models.enums import NotificationType
from setukpa.models.grade import ExaminerGrade, Grade
from setukpa.models.paper import Paper
from setukpa.models.user import ExaminerAssignment, User
from setukpa.schemas.grade import AdvisorGradeUpdate, ExaminerGradeUpdate
from setukpa.schemas.paper import GradeOverride
from setukpa.services import grade_aggregation
from setukpa.services.grade_aggregation import FinalScore
from setukpa.services.notification_service import notify
from setukpa.services.paper_service import (
    check_version,
    commit_versioned,
    ensure_reviewer,
    get_paper_or_404,
)

logger = logging.getLogger(__name__)

MAX_EXAMINER_SCORE = 100


def get_advisor_grade(db: Session, paper_id: int) -> Optional[Grade]:
    return db.query(Grade).filter(Grade.paper_id == paper_id).first()


def list_examiner_grades(db: Session, paper_id: int) -> List[ExaminerGrade]:
    return (
        db.query(ExaminerGrade)
        .filter(ExaminerGrade.paper_id == paper_id)
        .order_by(ExaminerGrade.id.asc())
        .all()
    )


def _ensure_examiner(db: Session, paper: Paper, user: User, operation: str) -> None:
    permissions.require(user.role, operation)
    if permissions.is_admin(user.role):
        return
    assigned = (
        db.query(ExaminerAssignment)
        .filter(
            ExaminerAssignment.examiner_id == user.id,
            ExaminerAssignment.student_id == paper.student_id,
        )
        .first()
    )
    if assigned is None:
        raise PermissionDeniedError(user.role, operation)


def _notify_graded(db: Session, paper: Paper) -> None:
    final = compute_for_paper(db, paper)
    notify(
        paper.student_id,
        NotificationType.PAPER_GRADED,
        "Nilai diperbarui",
        f"Nilai akhir '{paper.title}': {final.score}",
        related_id=paper.id,
    )


def record_advisor_grade(
    db: Session,
    *,
    paper_id: int,
    advisor: User,
    obj_in: AdvisorGradeUpdate,
) -> Grade:
    """
    Advisor rubric grade (create or update).
    final_score is always the sum of the four validated sub-scores.
    """
    paper = get_paper_or_404(db, paper_id)
    ensure_reviewer(db, paper, advisor, "record_advisor_grade")

    maxima = grade_aggregation.default_rubric_maxima()
    scores = {
        "content": obj_in.content_score,
        "structure": obj_in.structure_score,
        "language": obj_in.language_score,
        "format": obj_in.format_score,
    }
    final_score = grade_aggregation.rubric_total(scores, maxima)

    grade = get_advisor_grade(db, paper_id)
    if grade is None:
        grade = Grade(paper_id=paper_id)

    grade.advisor_id = advisor.id
    grade.content_score = obj_in.content_score
    grade.structure_score = obj_in.structure_score
    grade.language_score = obj_in.language_score
    grade.format_score = obj_in.format_score
    grade.max_content = maxima["content"]
    grade.max_structure = maxima["structure"]
    grade.max_language = maxima["language"]
    grade.max_format = maxima["format"]
    grade.final_score = final_score
    grade.advisor_feedback = obj_in.advisor_feedback

    db.add(grade)
    db.commit()
    db.refresh(grade)
    logger.info(f"Advisor {advisor.id} graded paper {paper_id}: {final_score}")

    _notify_graded(db, paper)
    return grade


def record_examiner_grade(
    db: Session,
    *,
    paper_id: int,
    examiner: User,
    obj_in: ExaminerGradeUpdate,
) -> ExaminerGrade:
    """One row per examiner; grading again replaces that examiner's score."""
    paper = get_paper_or_404(db, paper_id)
    _ensure_examiner(db, paper, examiner, "record_examiner_grade")
    score = grade_aggregation.validate_score("score", obj_in.score, MAX_EXAMINER_SCORE)

    examiner_grade = (
        db.query(ExaminerGrade)
        .filter(
            ExaminerGrade.paper_id == paper_id,
            ExaminerGrade.examiner_id == examiner.id,
        )
        .first()
    )
    if examiner_grade is None:
        examiner_grade = ExaminerGrade(paper_id=paper_id, examiner_id=examiner.id)

    examiner_grade.score = score
    examiner_grade.feedback = obj_in.feedback

    db.add(examiner_grade)
    db.commit()
    db.refresh(examiner_grade)
    logger.info(f"Examiner {examiner.id} graded paper {paper_id}: {score}")

    _notify_graded(db, paper)
    return examiner_grade


def set_grade_override(
    db: Session,
    *,
    paper_id: int,
    user: User,
    obj_in: GradeOverride,
) -> Paper:
    """Set (or clear with null) Paper.grade, which wins over every other source."""
    paper = get_paper_or_404(db, paper_id)
    _ensure_examiner(db, paper, user, "set_grade_override")
    check_version(paper, obj_in.version, "Paper")

    if obj_in.grade is not None:
        paper.grade = grade_aggregation.validate_score("grade", obj_in.grade, MAX_EXAMINER_SCORE)
    else:
        paper.grade = None

    db.add(paper)
    commit_versioned(db, "Paper", paper.id)
    db.refresh(paper)
    logger.info(f"Grade override on paper {paper_id} set to {paper.grade} by user {user.id}")

    _notify_graded(db, paper)
    return paper


def compute_for_paper(db: Session, paper: Paper) -> FinalScore:
    return grade_aggregation.compute_final_score(
        paper,
        get_advisor_grade(db, paper.id),
        list_examiner_grades(db, paper.id),
    )


def final_score_report(db: Session, paper: Paper) -> dict:
    advisor_grade = get_advisor_grade(db, paper.id)
    examiner_grades = list_examiner_grades(db, paper.id)
    final = grade_aggregation.compute_final_score(paper, advisor_grade, examiner_grades)
    return {
        "paper_id": paper.id,
        "score": final.score,
        "source": final.source.value,
        "passed": final.passed(),
        "advisor_grade": advisor_grade,
        "examiner_grades": examiner_grades,
    }


def list_student_grades(db: Session, *, student: User) -> List[dict]:
    """Graded papers of one student, newest first."""
    papers = (
        db.query(Paper)
        .filter(Paper.student_id == student.id)
        .order_by(Paper.created_at.desc(), Paper.id.desc())
        .all()
    )
    results = []
    for paper in papers:
        report = final_score_report(db, paper)
        if report["source"] == grade_aggregation.ScoreSource.NONE.value:
            continue
        results.append(report)
    return results


def list_all_grades(
    db: Session,
    *,
    batch_id: Optional[int] = None,
    include_ungraded: bool = False,
) -> List[dict]:
    """
    Grade recap across students for reviewers and admins, newest first.
    Ungraded papers are left out unless include_ungraded is set.
    """
    query = db.query(Paper, User).join(User, Paper.student_id == User.id)
    if batch_id is not None:
        query = query.filter(User.batch_id == batch_id)

    rows = []
    for paper, student in query.order_by(Paper.updated_at.desc(), Paper.id.desc()).all():
        report = final_score_report(db, paper)
        if include_ungraded or report["source"] != grade_aggregation.ScoreSource.NONE.value:
            rows.append((paper, student, report))

    # the grading advisor if there is one, else the assigned advisor
    advisor_ids = {
        report["advisor_grade"].advisor_id if report["advisor_grade"] else student.pembimbing_id
        for _, student, report in rows
    }
    advisor_ids.discard(None)
    names = {}
    if advisor_ids:
        names = {u.id: u.name for u in db.query(User).filter(User.id.in_(advisor_ids))}

    results = []
    for paper, student, report in rows:
        advisor_id = report["advisor_grade"].advisor_id if report["advisor_grade"] else student.pembimbing_id
        examiners = (
            db.query(User)
            .join(ExaminerAssignment, ExaminerAssignment.examiner_id == User.id)
            .filter(ExaminerAssignment.student_id == student.id)
            .order_by(User.name.asc())
            .all()
        )
        report.update(
            {
                "paper_title": paper.title,
                "student_id": student.id,
                "student_name": student.name,
                "student_nosis": student.nosis,
                "advisor_name": names.get(advisor_id),
                "examiner_names": [e.name for e in examiners],
                "updated_at": paper.updated_at,
            }
        )
        results.append(report)
    return results
