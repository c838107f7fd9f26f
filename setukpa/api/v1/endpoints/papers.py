# setukpa/api/v1/endpoints/papers.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from setukpa.core import permissions
from setukpa.core.exceptions import NotFoundError
from setukpa.core.security import get_current_student, get_current_user
from setukpa.db.session import get_db
from setukpa.models.user import User
from setukpa.schemas.grade import FinalScorePublic
from setukpa.schemas.paper import (
    ChapterContentUpdate,
    ChapterPublic,
    ChapterReopen,
    ChapterReview,
    ChapterSubmit,
    FinalDocumentAttach,
    FinalDocumentReview,
    GradeOverride,
    PaperOpen,
    PaperPublic,
)
from setukpa.services import distribution, grading_service, paper_service

router = APIRouter(prefix="/papers", tags=["papers"])


def _visible_paper(db: Session, paper_id: int, user: User):
    paper = paper_service.get_paper_or_404(db, paper_id)
    if not paper_service.can_view(paper, user):
        # students must not learn that other papers exist
        raise NotFoundError("Paper", paper_id)
    return paper


@router.post("/", response_model=PaperPublic, status_code=status.HTTP_201_CREATED)
def open_paper(
    obj_in: PaperOpen,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Student opens an assignment; the paper is created on first access.
    """
    return distribution.open_paper(
        db, student=current_student, assignment_id=obj_in.assignment_id
    )


@router.get("/", response_model=List[PaperPublic])
def list_papers(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    student_id: int | None = None,
    assignment_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
):
    # students only ever see their own papers
    if not permissions.can(current_user.role, "view_all_papers"):
        student_id = current_user.id
    return paper_service.list_papers(
        db, student_id=student_id, assignment_id=assignment_id, skip=skip, limit=limit
    )


@router.get("/{paper_id}", response_model=PaperPublic)
def get_paper(
    paper_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    paper = _visible_paper(db, paper_id, current_user)
    return paper_service.sync_structure(db, paper=paper)


@router.put("/{paper_id}/chapters/{chapter_index}", response_model=ChapterPublic)
def update_chapter_content(
    paper_id: int,
    chapter_index: int,
    obj_in: ChapterContentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.update_chapter_content(
        db,
        paper_id=paper_id,
        chapter_index=chapter_index,
        content=obj_in.content,
        version=obj_in.version,
        user=current_user,
    )


@router.post("/{paper_id}/chapters/{chapter_index}/submit", response_model=ChapterPublic)
def submit_chapter(
    paper_id: int,
    chapter_index: int,
    obj_in: ChapterSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.submit_chapter(
        db,
        paper_id=paper_id,
        chapter_index=chapter_index,
        version=obj_in.version,
        user=current_user,
        comment=obj_in.comment,
    )


@router.post("/{paper_id}/chapters/{chapter_index}/review", response_model=ChapterPublic)
def review_chapter(
    paper_id: int,
    chapter_index: int,
    obj_in: ChapterReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Advisor/admin approves a submitted chapter or sends it back for revision.
    """
    return paper_service.review_chapter(
        db,
        paper_id=paper_id,
        chapter_index=chapter_index,
        decision=obj_in.decision,
        version=obj_in.version,
        user=current_user,
        feedback=obj_in.feedback,
    )


@router.post("/{paper_id}/chapters/{chapter_index}/reopen", response_model=ChapterPublic)
def reopen_chapter(
    paper_id: int,
    chapter_index: int,
    obj_in: ChapterReopen,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.reopen_chapter(
        db,
        paper_id=paper_id,
        chapter_index=chapter_index,
        version=obj_in.version,
        user=current_user,
        reason=obj_in.reason,
    )


@router.put("/{paper_id}/final-document", response_model=PaperPublic)
def attach_final_document(
    paper_id: int,
    obj_in: FinalDocumentAttach,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.attach_final_document(
        db, paper_id=paper_id, user=current_user, obj_in=obj_in
    )


@router.delete("/{paper_id}/final-document", response_model=PaperPublic)
def remove_final_document(
    paper_id: int,
    version: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.remove_final_document(
        db, paper_id=paper_id, user=current_user, version=version
    )


@router.post("/{paper_id}/final-document/review", response_model=PaperPublic)
def review_final_document(
    paper_id: int,
    obj_in: FinalDocumentReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return paper_service.review_final_document(
        db,
        paper_id=paper_id,
        user=current_user,
        decision=obj_in.decision,
        feedback=obj_in.feedback,
        version=obj_in.version,
    )


@router.put("/{paper_id}/grade", response_model=PaperPublic)
def set_grade_override(
    paper_id: int,
    obj_in: GradeOverride,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Examiner/admin override of the paper's final score (null clears it).
    """
    return grading_service.set_grade_override(
        db, paper_id=paper_id, user=current_user, obj_in=obj_in
    )


@router.get("/{paper_id}/final-score", response_model=FinalScorePublic)
def get_final_score(
    paper_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    paper = _visible_paper(db, paper_id, current_user)
    return grading_service.final_score_report(db, paper)
