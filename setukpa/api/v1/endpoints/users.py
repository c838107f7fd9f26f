# setukpa/api/v1/endpoints/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from setukpa.core.security import get_current_admin, get_current_user
from setukpa.db.session import get_db
from setukpa.models.user import User
from setukpa.schemas.auth import UserPublic
from setukpa.schemas.user import (
    AdvisorAssign,
    BatchCreate,
    BatchPublic,
    ExaminerAssign,
    UserCreate,
)
from setukpa.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserPublic)
def read_me(
    current_user: User = Depends(get_current_user),
):
    return current_user


@router.post("/", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    obj_in: UserCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    if db.query(User).filter(User.email == obj_in.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    return user_service.create_user(db, obj_in=obj_in)


@router.post("/batches", response_model=BatchPublic, status_code=status.HTTP_201_CREATED)
def create_batch(
    obj_in: BatchCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return user_service.create_batch(db, obj_in=obj_in)


@router.put("/{student_id}/advisor", response_model=UserPublic)
def assign_advisor(
    student_id: int,
    obj_in: AdvisorAssign,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return user_service.assign_advisor(
        db, student_id=student_id, pembimbing_id=obj_in.pembimbing_id
    )


@router.post("/{student_id}/examiners", status_code=status.HTTP_201_CREATED)
def assign_examiner(
    student_id: int,
    obj_in: ExaminerAssign,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    link = user_service.assign_examiner(
        db, student_id=student_id, examiner_id=obj_in.examiner_id
    )
    return {"student_id": link.student_id, "examiner_id": link.examiner_id}
