# setukpa/api/v1/endpoints/assignments.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from setukpa.core.security import get_current_student, get_current_user, require_capability
from setukpa.db.session import get_db
from setukpa.models.user import User
from setukpa.schemas.assignment import (
    AssignmentCreate,
    AssignmentPublic,
    AssignmentUpdate,
    DistributionResult,
    PaperTemplateCreate,
    PaperTemplatePublic,
    StudentAssignmentView,
)
from setukpa.services import assignment_service, distribution

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post("/templates", response_model=PaperTemplatePublic, status_code=status.HTTP_201_CREATED)
def create_template(
    obj_in: PaperTemplateCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_capability("manage_assignments")),
):
    return assignment_service.create_template(db, obj_in=obj_in)


@router.post("/", response_model=AssignmentPublic, status_code=status.HTTP_201_CREATED)
def create_assignment(
    obj_in: AssignmentCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_capability("manage_assignments")),
):
    """
    Admin creates an assignment.
    """
    return assignment_service.create_assignment(db, obj_in=obj_in)


@router.get("/", response_model=List[AssignmentPublic])
def list_assignments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    skip: int = 0,
    limit: int = 100,
):
    return assignment_service.list_assignments(db, skip=skip, limit=limit)


@router.get("/mine", response_model=List[StudentAssignmentView])
def list_my_assignments(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Student view: applicable assignments with their resolved status.
    """
    return distribution.list_for_student(db, student=current_student)


@router.get("/{assignment_id}", response_model=AssignmentPublic)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return assignment_service.get_assignment_or_404(db, assignment_id)


@router.put("/{assignment_id}", response_model=AssignmentPublic)
def update_assignment(
    assignment_id: int,
    obj_in: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_capability("manage_assignments")),
):
    assignment = assignment_service.get_assignment_or_404(db, assignment_id)
    return assignment_service.update_assignment(db, db_obj=assignment, obj_in=obj_in)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_capability("manage_assignments")),
):
    assignment = assignment_service.get_assignment_or_404(db, assignment_id)
    assignment_service.delete_assignment(db, db_obj=assignment)
    return None


@router.post("/{assignment_id}/distribute", response_model=DistributionResult)
def distribute_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_capability("distribute_papers")),
):
    """
    Pre-create papers for every student the assignment applies to.
    """
    assignment = assignment_service.get_assignment_or_404(db, assignment_id)
    return distribution.distribute_papers(db, assignment=assignment)
