# setukpa/schemas/grade.py
from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal


class AdvisorGradeUpdate(BaseModel):
    """Advisor rubric; final_score is derived, never sent"""
    content_score: Decimal
    structure_score: Decimal
    language_score: Decimal
    format_score: Decimal
    advisor_feedback: str | None = None


class AdvisorGradePublic(AdvisorGradeUpdate):
    id: int
    paper_id: int
    advisor_id: int
    max_content: int
    max_structure: int
    max_language: int
    max_format: int
    final_score: Decimal
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ExaminerGradeUpdate(BaseModel):
    score: Decimal
    feedback: str | None = None


class ExaminerGradePublic(ExaminerGradeUpdate):
    id: int
    paper_id: int
    examiner_id: int
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class FinalScorePublic(BaseModel):
    """Score shown to the student and in reports"""
    paper_id: int
    score: Decimal
    source: str  # OVERRIDE / ADVISOR / EXAMINER / NONE
    passed: bool
    advisor_grade: AdvisorGradePublic | None = None
    examiner_grades: list[ExaminerGradePublic] = []


class GradeRecapRow(FinalScorePublic):
    """One line of the cross-student grade recap"""
    paper_title: str
    student_id: int
    student_name: str
    student_nosis: str | None = None
    advisor_name: str | None = None
    examiner_names: list[str] = []
    updated_at: datetime | None = None
