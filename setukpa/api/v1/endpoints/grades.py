# setukpa/api/v1/endpoints/grades.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from setukpa.core.security import get_current_student, get_current_user, require_capability
from setukpa.db.session import get_db
from setukpa.models.enums import Role
from setukpa.models.user import User
from setukpa.schemas.grade import (
    AdvisorGradePublic,
    AdvisorGradeUpdate,
    ExaminerGradePublic,
    ExaminerGradeUpdate,
    FinalScorePublic,
    GradeRecapRow,
)
from setukpa.services import grading_service

router = APIRouter(prefix="/grades", tags=["grades"])


@router.get("/", response_model=List[GradeRecapRow])
def list_all_grades(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability("view_all_papers")),
    batch_id: int | None = None,
):
    """
    Grade recap for advisors, examiners and admins. Helpers also see
    papers that have no grade yet.
    """
    return grading_service.list_all_grades(
        db,
        batch_id=batch_id,
        include_ungraded=current_user.role == Role.HELPER.value,
    )


@router.get("/me", response_model=List[FinalScorePublic])
def list_my_grades(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Student sees the final score of every graded paper.
    """
    return grading_service.list_student_grades(db, student=current_student)


@router.put("/{paper_id}/advisor", response_model=AdvisorGradePublic)
def record_advisor_grade(
    paper_id: int,
    obj_in: AdvisorGradeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Advisor rubric: content / structure / language / format.
    """
    return grading_service.record_advisor_grade(
        db, paper_id=paper_id, advisor=current_user, obj_in=obj_in
    )


@router.put("/{paper_id}/examiner", response_model=ExaminerGradePublic)
def record_examiner_grade(
    paper_id: int,
    obj_in: ExaminerGradeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return grading_service.record_examiner_grade(
        db, paper_id=paper_id, examiner=current_user, obj_in=obj_in
    )
