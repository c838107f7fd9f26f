# setukpa/services/assignment_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from setukpa.core.exceptions import NotFoundError
from setukpa.models.assignment import Assignment, PaperTemplate
from setukpa.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    PaperTemplateCreate,
)


def create_template(db: Session, *, obj_in: PaperTemplateCreate) -> PaperTemplate:
    db_obj = PaperTemplate(name=obj_in.name, pages=obj_in.pages)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def get_template(db: Session, template_id: Optional[int]) -> Optional[PaperTemplate]:
    if template_id is None:
        return None
    return db.query(PaperTemplate).get(template_id)


def create_assignment(db: Session, *, obj_in: AssignmentCreate) -> Assignment:
    """
    admin creates an assignment
    """
    if obj_in.template_id is not None and get_template(db, obj_in.template_id) is None:
        raise NotFoundError("PaperTemplate", obj_in.template_id)

    db_obj = Assignment(**obj_in.model_dump())
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def get_assignment(db: Session, assignment_id: int) -> Optional[Assignment]:
    return db.query(Assignment).get(assignment_id)


def get_assignment_or_404(db: Session, assignment_id: int) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)
    return assignment


def list_assignments(
    db: Session,
    *,
    skip: int = 0,
    limit: int = 100,
) -> List[Assignment]:
    return (
        db.query(Assignment)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_assignment(
    db: Session,
    *,
    db_obj: Assignment,
    obj_in: AssignmentUpdate,
) -> Assignment:
    update_data = obj_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def delete_assignment(db: Session, *, db_obj: Assignment) -> None:
    # papers are kept; they surface later as dangling references
    db.delete(db_obj)
    db.commit()
