# setukpa/models/grade.py
from sqlalchemy import (
    Column,
    Integer,
    Text,
    DateTime,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from setukpa.db.base import Base


class Grade(Base):
    """Advisor rubric grade, one per paper."""
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), nullable=False, unique=True, index=True)
    advisor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    content_score = Column(Numeric(5, 2), nullable=False)
    structure_score = Column(Numeric(5, 2), nullable=False)
    language_score = Column(Numeric(5, 2), nullable=False)
    format_score = Column(Numeric(5, 2), nullable=False)

    max_content = Column(Integer, nullable=False, default=30)
    max_structure = Column(Integer, nullable=False, default=25)
    max_language = Column(Integer, nullable=False, default=20)
    max_format = Column(Integer, nullable=False, default=25)

    # always content + structure + language + format
    final_score = Column(Numeric(5, 2), nullable=False)
    advisor_feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class ExaminerGrade(Base):
    __tablename__ = "examiner_grades"
    __table_args__ = (
        UniqueConstraint("paper_id", "examiner_id", name="uq_examiner_grade_paper_examiner"),
    )

    id = Column(Integer, primary_key=True, index=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), nullable=False, index=True)
    examiner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    score = Column(Numeric(5, 2), nullable=False)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
