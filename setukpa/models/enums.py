# setukpa/models/enums.py
import enum


class Role(str, enum.Enum):
    SISWA = "SISWA"  # student
    PEMBIMBING = "PEMBIMBING"  # advisor
    PENGUJI = "PENGUJI"  # examiner
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    HELPER = "HELPER"


class ChapterStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REVISION = "REVISION"


class ContentApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class FinalApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REVISION = "REVISION"


class AssignmentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"


class NotificationType(str, enum.Enum):
    PAPER_SUBMITTED = "PAPER_SUBMITTED"
    CHAPTER_REVIEWED = "CHAPTER_REVIEWED"
    PAPER_GRADED = "PAPER_GRADED"
    FINAL_DOCUMENT_REVIEWED = "FINAL_DOCUMENT_REVIEWED"
