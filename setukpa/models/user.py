# setukpa/models/user.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from setukpa.db.base import Base
from setukpa.models.enums import Role


class Batch(Base):
    """Angkatan: a cohort of students sharing assignments and timelines."""
    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    nosis = Column(String(50), unique=True, nullable=True, index=True)  # student number / login id
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=Role.SISWA.value)

    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=True, index=True)
    # assigned advisor (students only)
    pembimbing_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ExaminerAssignment(Base):
    __tablename__ = "examiner_assignments"
    __table_args__ = (
        UniqueConstraint("examiner_id", "student_id", name="uq_examiner_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    examiner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
