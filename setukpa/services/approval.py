# setukpa/services/approval.py
from typing import Iterable, List

from setukpa.core.exceptions import InvalidTransitionError
from setukpa.models.enums import ChapterStatus, ContentApprovalStatus

# APPROVED -> DRAFT is the admin force-unlock
CHAPTER_TRANSITIONS = {
    ChapterStatus.DRAFT: {ChapterStatus.SUBMITTED},
    ChapterStatus.SUBMITTED: {ChapterStatus.APPROVED, ChapterStatus.REVISION},
    ChapterStatus.REVISION: {ChapterStatus.SUBMITTED},
    ChapterStatus.APPROVED: {ChapterStatus.DRAFT},
}

REVIEW_DECISIONS = {ChapterStatus.APPROVED, ChapterStatus.REVISION}


def check_transition(current: str, target: str) -> ChapterStatus:
    """Validate a chapter move and return the target status."""
    try:
        current_status = ChapterStatus(current)
        target_status = ChapterStatus(target)
    except ValueError:
        raise InvalidTransitionError(str(current), str(target))

    if target_status not in CHAPTER_TRANSITIONS[current_status]:
        raise InvalidTransitionError(current_status.value, target_status.value)
    return target_status


def derive_content_status(statuses: Iterable[str]) -> ContentApprovalStatus:
    """
    Paper-level content status from its chapters:
      - any chapter in REVISION -> REJECTED
      - every chapter APPROVED -> APPROVED
      - otherwise PENDING
    A paper without chapters is never APPROVED.
    """
    statuses = [ChapterStatus(s) for s in statuses]
    if any(s == ChapterStatus.REVISION for s in statuses):
        return ContentApprovalStatus.REJECTED
    if statuses and all(s == ChapterStatus.APPROVED for s in statuses):
        return ContentApprovalStatus.APPROVED
    return ContentApprovalStatus.PENDING


def pending_chapters(statuses: Iterable[str]) -> List[int]:
    """Indexes of chapters that are not APPROVED yet."""
    return [
        index
        for index, status in enumerate(statuses)
        if ChapterStatus(status) != ChapterStatus.APPROVED
    ]
