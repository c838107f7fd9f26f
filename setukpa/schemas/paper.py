# setukpa/schemas/paper.py
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Literal


class PaperOpen(BaseModel):
    assignment_id: int


class ChapterFeedbackPublic(BaseModel):
    id: int
    author_id: int
    status: str
    text: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ChapterPublic(BaseModel):
    position: int
    title: str
    content: str
    min_words: int
    status: str  # DRAFT / SUBMITTED / APPROVED / REVISION
    version: int
    feedback_history: list[ChapterFeedbackPublic] = []

    model_config = {"from_attributes": True}


class PaperPublic(BaseModel):
    id: int
    student_id: int
    assignment_id: int
    title: str
    subject: str
    total_words: int
    content_approval_status: str
    final_approval_status: str | None = None
    final_feedback: str | None = None

    final_file_name: str | None = None
    final_file_url: str | None = None
    final_file_size: int | None = None
    final_uploaded_at: datetime | None = None

    version: int
    chapters: list[ChapterPublic] = []

    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ChapterContentUpdate(BaseModel):
    content: str
    version: int  # chapter version the client last read


class ChapterSubmit(BaseModel):
    version: int
    comment: str | None = None


class ChapterReview(BaseModel):
    decision: Literal["APPROVED", "REVISION"]
    version: int
    feedback: str | None = None


class ChapterReopen(BaseModel):
    version: int
    reason: str | None = None


class FinalDocumentAttach(BaseModel):
    """Metadata returned by the file store; bytes never reach the core."""
    file_name: str
    file_url: str
    file_size: int = Field(ge=0)
    version: int | None = None


class FinalDocumentReview(BaseModel):
    decision: Literal["APPROVED", "REVISION"]
    feedback: str | None = None
    version: int | None = None


class GradeOverride(BaseModel):
    grade: Decimal | None = None  # null clears the override
    version: int | None = None
