# setukpa/services/user_service.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from setukpa.core.exceptions import InvalidTransitionError, NotFoundError
from setukpa.core.security import get_password_hash
from setukpa.models.enums import Role
from setukpa.models.user import Batch, ExaminerAssignment, User
from setukpa.schemas.auth import RegisterRequest
from setukpa.schemas.user import BatchCreate, UserCreate

logger = logging.getLogger(__name__)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def _ensure_role(user: User, role: Role) -> None:
    if user.role != role.value:
        raise InvalidTransitionError(
            user.role, role.value, message=f"Pengguna {user.id} bukan {role.value}"
        )


def create_user(db: Session, *, obj_in: UserCreate) -> User:
    user = User(
        email=obj_in.email,
        nosis=obj_in.nosis,
        password_hash=get_password_hash(obj_in.password),
        name=obj_in.name,
        role=obj_in.role,
        batch_id=obj_in.batch_id,
        pembimbing_id=obj_in.pembimbing_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_batch(db: Session, *, obj_in: BatchCreate) -> Batch:
    batch = Batch(**obj_in.model_dump())
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return batch


def assign_advisor(db: Session, *, student_id: int, pembimbing_id: Optional[int]) -> User:
    student = get_user_or_404(db, student_id)
    _ensure_role(student, Role.SISWA)
    if pembimbing_id is not None:
        _ensure_role(get_user_or_404(db, pembimbing_id), Role.PEMBIMBING)

    student.pembimbing_id = pembimbing_id
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def assign_examiner(db: Session, *, student_id: int, examiner_id: int) -> ExaminerAssignment:
    student = get_user_or_404(db, student_id)
    _ensure_role(student, Role.SISWA)
    _ensure_role(get_user_or_404(db, examiner_id), Role.PENGUJI)

    existing = (
        db.query(ExaminerAssignment)
        .filter(
            ExaminerAssignment.student_id == student_id,
            ExaminerAssignment.examiner_id == examiner_id,
        )
        .first()
    )
    if existing is not None:
        return existing

    link = ExaminerAssignment(student_id=student_id, examiner_id=examiner_id)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def register_student(db: Session, *, obj_in: RegisterRequest) -> User:
    if obj_in.batch_id is not None and db.query(Batch).get(obj_in.batch_id) is None:
        raise NotFoundError("Batch", obj_in.batch_id)

    student = User(
        email=obj_in.email,
        nosis=obj_in.nosis,
        password_hash=get_password_hash(obj_in.password),
        name=obj_in.name,
        role=Role.SISWA.value,
        batch_id=obj_in.batch_id,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info(f"Student {student.id} registered")
    return student
