# setukpa/services/paper_service.py
"""
Paper lifecycle: chapter structure, chapter approval and the final document.

Every write takes the version token the client last read. Chapter writes
are checked against the chapter's own version, paper-level writes against
the paper's version; SQLAlchemy's version counter catches the remaining
races between the check and the flush.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from setukpa.core import permissions
from setukpa.core.exceptions import (
    DuplicatePaperError,
    IncompleteContentError,
    InvalidTransitionError,
    NotFoundError,
    OutOfRangeError,
    PermissionDeniedError,
    StaleWriteError,
)
from setukpa.models.assignment import Assignment
from setukpa.models.enums import (
    ChapterStatus,
    ContentApprovalStatus,
    FinalApprovalStatus,
    NotificationType,
)
from setukpa.models.paper import Chapter, ChapterFeedback, Paper
from setukpa.models.user import User
from setukpa.schemas.paper import FinalDocumentAttach
from setukpa.services import approval, structure
from setukpa.services.assignment_service import get_template
from setukpa.services.notification_service import notify

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# lookups and guards
# ---------------------------------------------------------------------------

def get_paper(db: Session, paper_id: int) -> Optional[Paper]:
    return db.query(Paper).get(paper_id)


def get_paper_or_404(db: Session, paper_id: int) -> Paper:
    paper = get_paper(db, paper_id)
    if paper is None:
        raise NotFoundError("Paper", paper_id)
    return paper


def find_paper(db: Session, *, assignment_id: int, student_id: int) -> Optional[Paper]:
    return (
        db.query(Paper)
        .filter(Paper.assignment_id == assignment_id, Paper.student_id == student_id)
        .first()
    )


def list_papers(
    db: Session,
    *,
    student_id: Optional[int] = None,
    assignment_id: Optional[int] = None,
    skip: int = 0,
    limit: Optional[int] = 100,
) -> List[Paper]:
    query = db.query(Paper)
    if student_id is not None:
        query = query.filter(Paper.student_id == student_id)
    if assignment_id is not None:
        query = query.filter(Paper.assignment_id == assignment_id)
    return (
        query.order_by(Paper.updated_at.desc(), Paper.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def chapter_at(paper: Paper, chapter_index: int) -> Chapter:
    chapters = paper.chapters
    if not 0 <= chapter_index < len(chapters):
        raise OutOfRangeError(chapter_index, len(chapters))
    return chapters[chapter_index]


def check_version(obj, expected: Optional[int], resource_type: str) -> None:
    if expected is not None and obj.version != expected:
        raise StaleWriteError(resource_type, obj.id, expected=expected, actual=obj.version)


def commit_versioned(db: Session, resource_type: str, resource_id: int) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.info(f"Concurrent write rejected on {resource_type} {resource_id}")
        raise StaleWriteError(resource_type, resource_id)


def ensure_owner(paper: Paper, user: User, operation: str) -> None:
    permissions.require(user.role, operation)
    if paper.student_id != user.id:
        raise PermissionDeniedError(user.role, operation)


def ensure_reviewer(db: Session, paper: Paper, user: User, operation: str) -> None:
    """Admins, or the advisor assigned to the paper's student."""
    permissions.require(user.role, operation)
    if permissions.is_admin(user.role):
        return
    student = db.query(User).get(paper.student_id)
    if student is None or student.pembimbing_id != user.id:
        raise PermissionDeniedError(user.role, operation)


def can_view(paper: Paper, user: User) -> bool:
    if paper.student_id == user.id:
        return True
    return permissions.can(user.role, "view_all_papers")


# ---------------------------------------------------------------------------
# creation and structure
# ---------------------------------------------------------------------------

def create_paper(db: Session, *, student: User, assignment: Assignment, commit: bool = True) -> Paper:
    """
    New paper for (assignment, student) seeded from the assignment template.
    At most one paper exists per pair.
    """
    if find_paper(db, assignment_id=assignment.id, student_id=student.id) is not None:
        raise DuplicatePaperError(assignment.id, student.id)

    template = get_template(db, assignment.template_id)
    seeds = structure.initialize_structure(template)

    paper = Paper(
        assignment_id=assignment.id,
        student_id=student.id,
        title=assignment.title,
        subject=assignment.subject,
        content="",
        total_words=structure.template_word_target(template),
        content_approval_status=ContentApprovalStatus.PENDING.value,
    )
    paper.chapters = [
        Chapter(
            position=position,
            title=seed.title,
            content="",
            min_words=seed.min_words,
            status=ChapterStatus.DRAFT.value,
        )
        for position, seed in enumerate(seeds)
    ]
    db.add(paper)

    if commit:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicatePaperError(assignment.id, student.id)
        db.refresh(paper)
    return paper


def sync_structure(db: Session, *, paper: Paper) -> Paper:
    """Append template chapters the paper is missing; existing chapters are untouched."""
    assignment = db.query(Assignment).get(paper.assignment_id)
    if assignment is None:
        return paper

    missing = structure.missing_chapters(
        [c.title for c in paper.chapters], get_template(db, assignment.template_id)
    )
    if not missing:
        return paper

    next_position = len(paper.chapters)
    for offset, seed in enumerate(missing):
        paper.chapters.append(
            Chapter(
                position=next_position + offset,
                title=seed.title,
                content="",
                min_words=seed.min_words,
                status=ChapterStatus.DRAFT.value,
            )
        )
    _refresh_content_status(paper)
    logger.info(f"Synced {len(missing)} new chapter(s) from template into paper {paper.id}")

    db.add(paper)
    commit_versioned(db, "Paper", paper.id)
    db.refresh(paper)
    return paper


def update_chapter_content(
    db: Session,
    *,
    paper_id: int,
    chapter_index: int,
    content: str,
    version: int,
    user: User,
) -> Chapter:
    """
    Student saves a chapter. Status is left alone (saving is not submitting);
    APPROVED chapters are locked until an admin reopens them.
    """
    paper = get_paper_or_404(db, paper_id)
    ensure_owner(paper, user, "edit_chapter")
    chapter = chapter_at(paper, chapter_index)
    check_version(chapter, version, "Chapter")

    if chapter.status == ChapterStatus.APPROVED.value:
        raise InvalidTransitionError(
            chapter.status,
            chapter.status,
            message="Bab yang sudah disetujui tidak dapat diubah",
        )

    chapter.content = content
    db.add(chapter)
    commit_versioned(db, "Chapter", chapter.id)
    db.refresh(chapter)
    return chapter


# ---------------------------------------------------------------------------
# chapter approval
# ---------------------------------------------------------------------------

def _refresh_content_status(paper: Paper) -> None:
    new_status = approval.derive_content_status(c.status for c in paper.chapters)
    if paper.content_approval_status != new_status.value:
        paper.content_approval_status = new_status.value

    # content no longer approved: an attached final document needs a new review
    if (
        new_status != ContentApprovalStatus.APPROVED
        and paper.final_file_url
        and paper.final_approval_status != FinalApprovalStatus.PENDING.value
    ):
        paper.final_approval_status = FinalApprovalStatus.PENDING.value


def _transition(
    db: Session,
    *,
    paper: Paper,
    chapter: Chapter,
    target: ChapterStatus,
    user: User,
    text: Optional[str],
) -> Chapter:
    approval.check_transition(chapter.status, target.value)
    chapter.status = target.value
    if text:
        chapter.feedback_history.append(
            ChapterFeedback(author_id=user.id, status=target.value, text=text)
        )
    _refresh_content_status(paper)

    db.add(paper)
    commit_versioned(db, "Chapter", chapter.id)
    db.refresh(chapter)
    return chapter


def submit_chapter(
    db: Session,
    *,
    paper_id: int,
    chapter_index: int,
    version: int,
    user: User,
    comment: Optional[str] = None,
) -> Chapter:
    paper = get_paper_or_404(db, paper_id)
    ensure_owner(paper, user, "submit_chapter")
    chapter = chapter_at(paper, chapter_index)
    check_version(chapter, version, "Chapter")

    chapter = _transition(
        db, paper=paper, chapter=chapter, target=ChapterStatus.SUBMITTED, user=user, text=comment
    )
    logger.info(f"Paper {paper.id} chapter {chapter_index} submitted by user {user.id}")

    notify(
        user.pembimbing_id,
        NotificationType.PAPER_SUBMITTED,
        "Bab baru menunggu review",
        f"{user.name} mengirim '{chapter.title}' untuk direview",
        related_id=paper.id,
    )
    return chapter


def review_chapter(
    db: Session,
    *,
    paper_id: int,
    chapter_index: int,
    decision: str,
    version: int,
    user: User,
    feedback: Optional[str] = None,
) -> Chapter:
    """Advisor/admin moves a SUBMITTED chapter to APPROVED or REVISION."""
    paper = get_paper_or_404(db, paper_id)
    ensure_reviewer(db, paper, user, "review_chapter")

    try:
        target = ChapterStatus(decision)
    except ValueError:
        target = None
    if target not in approval.REVIEW_DECISIONS:
        raise InvalidTransitionError(str(decision), str(decision), message="Keputusan review tidak valid")

    chapter = chapter_at(paper, chapter_index)
    check_version(chapter, version, "Chapter")

    chapter = _transition(db, paper=paper, chapter=chapter, target=target, user=user, text=feedback)
    logger.info(
        f"Paper {paper.id} chapter {chapter_index} -> {target.value} by user {user.id}; "
        f"content status {paper.content_approval_status}"
    )

    verdict = "disetujui" if target == ChapterStatus.APPROVED else "perlu revisi"
    notify(
        paper.student_id,
        NotificationType.CHAPTER_REVIEWED,
        "Hasil review bab",
        f"'{chapter.title}' {verdict}",
        related_id=paper.id,
    )
    return chapter


def reopen_chapter(
    db: Session,
    *,
    paper_id: int,
    chapter_index: int,
    version: int,
    user: User,
    reason: Optional[str] = None,
) -> Chapter:
    """Admin force-unlock: APPROVED -> DRAFT."""
    paper = get_paper_or_404(db, paper_id)
    permissions.require(user.role, "reopen_chapter")
    chapter = chapter_at(paper, chapter_index)
    check_version(chapter, version, "Chapter")

    chapter = _transition(db, paper=paper, chapter=chapter, target=ChapterStatus.DRAFT, user=user, text=reason)
    logger.warning(f"Paper {paper.id} chapter {chapter_index} reopened by admin {user.id}")
    return chapter


# ---------------------------------------------------------------------------
# final document
# ---------------------------------------------------------------------------

def attach_final_document(
    db: Session,
    *,
    paper_id: int,
    user: User,
    obj_in: FinalDocumentAttach,
) -> Paper:
    paper = get_paper_or_404(db, paper_id)
    ensure_owner(paper, user, "attach_final_document")
    check_version(paper, obj_in.version, "Paper")

    pending = approval.pending_chapters(c.status for c in paper.chapters)
    if pending or not paper.chapters:
        raise IncompleteContentError(pending)

    paper.final_file_name = obj_in.file_name
    paper.final_file_url = obj_in.file_url
    paper.final_file_size = obj_in.file_size
    paper.final_uploaded_at = datetime.now(timezone.utc)
    # a new upload always needs a new review
    paper.final_approval_status = FinalApprovalStatus.PENDING.value
    paper.final_feedback = None

    db.add(paper)
    commit_versioned(db, "Paper", paper.id)
    db.refresh(paper)
    logger.info(f"Final document '{obj_in.file_name}' attached to paper {paper.id}")
    return paper


def remove_final_document(
    db: Session,
    *,
    paper_id: int,
    user: User,
    version: Optional[int] = None,
) -> Paper:
    paper = get_paper_or_404(db, paper_id)
    if permissions.is_admin(user.role):
        permissions.require(user.role, "remove_final_document")
    else:
        ensure_owner(paper, user, "remove_final_document")
    check_version(paper, version, "Paper")

    paper.final_file_name = None
    paper.final_file_url = None
    paper.final_file_size = None
    paper.final_uploaded_at = None
    paper.final_approval_status = None
    paper.final_feedback = None

    db.add(paper)
    commit_versioned(db, "Paper", paper.id)
    db.refresh(paper)
    return paper


def review_final_document(
    db: Session,
    *,
    paper_id: int,
    user: User,
    decision: str,
    feedback: Optional[str] = None,
    version: Optional[int] = None,
) -> Paper:
    paper = get_paper_or_404(db, paper_id)
    ensure_reviewer(db, paper, user, "review_final_document")
    check_version(paper, version, "Paper")

    if not paper.final_file_url:
        raise InvalidTransitionError(
            str(paper.final_approval_status),
            decision,
            message="Dokumen final belum diunggah",
        )
    try:
        target = FinalApprovalStatus(decision)
    except ValueError:
        target = FinalApprovalStatus.PENDING
    if target == FinalApprovalStatus.PENDING:
        raise InvalidTransitionError(str(paper.final_approval_status), decision)
    # a paper is only finalized on fully approved content
    if (
        target == FinalApprovalStatus.APPROVED
        and paper.content_approval_status != ContentApprovalStatus.APPROVED.value
    ):
        raise IncompleteContentError(approval.pending_chapters(c.status for c in paper.chapters))

    paper.final_approval_status = target.value
    paper.final_feedback = feedback

    db.add(paper)
    commit_versioned(db, "Paper", paper.id)
    db.refresh(paper)

    notify(
        paper.student_id,
        NotificationType.FINAL_DOCUMENT_REVIEWED,
        "Hasil review dokumen final",
        "Dokumen final disetujui" if target == FinalApprovalStatus.APPROVED
        else "Dokumen final perlu revisi",
        related_id=paper.id,
    )
    return paper
