# setukpa/schemas/assignment.py
from pydantic import BaseModel
from datetime import datetime
from typing import Any

from setukpa.models.enums import AssignmentStatus


class PaperTemplateCreate(BaseModel):
    name: str
    pages: list[dict[str, Any]] = []


class PaperTemplatePublic(PaperTemplateCreate):
    id: int

    model_config = {"from_attributes": True}


class AssignmentBase(BaseModel):
    title: str
    subject: str
    activation_date: datetime | None = None
    deadline: datetime | None = None
    status: AssignmentStatus = AssignmentStatus.SCHEDULED
    batch_id: int | None = None
    template_id: int | None = None

    model_config = {"use_enum_values": True}


class AssignmentCreate(AssignmentBase):
    pass


class AssignmentUpdate(BaseModel):
    title: str | None = None
    subject: str | None = None
    activation_date: datetime | None = None
    deadline: datetime | None = None
    status: AssignmentStatus | None = None
    batch_id: int | None = None
    template_id: int | None = None

    model_config = {"use_enum_values": True}


class AssignmentPublic(AssignmentBase):
    id: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True, "use_enum_values": True}


class StudentAssignmentView(BaseModel):
    """One row of a student's assignment list"""
    assignment_id: int
    title: str | None = None
    subject: str | None = None
    deadline: datetime | None = None
    status: str  # SCHEDULED / AVAILABLE / MISSED / IN_PROGRESS / APPROVED / GRADED
    paper_id: int | None = None
    progress: int = 0
    total_chapters: int = 0
    error: dict | None = None


class DistributionResult(BaseModel):
    assignment_id: int
    created: int
    already_present: int
