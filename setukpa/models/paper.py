# setukpa/models/paper.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from setukpa.db.base import Base
from setukpa.models.enums import ChapterStatus, ContentApprovalStatus


class Paper(Base):
    __tablename__ = "papers"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_paper_assignment_student"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # no FK on assignment_id: assignments can be deleted under existing papers
    assignment_id = Column(Integer, nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")  # legacy flattened text
    total_words = Column(Integer, nullable=False, default=0)

    # examiner/admin override, wins over the advisor rubric score
    grade = Column(Numeric(5, 2), nullable=True)

    content_approval_status = Column(
        String(20), nullable=False, default=ContentApprovalStatus.PENDING.value
    )
    final_approval_status = Column(String(20), nullable=True)
    final_feedback = Column(Text, nullable=True)

    final_file_name = Column(String(255), nullable=True)
    final_file_url = Column(String(1024), nullable=True)
    final_file_size = Column(Integer, nullable=True)
    final_uploaded_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    chapters = relationship(
        "Chapter",
        back_populates="paper",
        order_by="Chapter.position",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class Chapter(Base):
    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint("paper_id", "position", name="uq_chapter_paper_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    paper_id = Column(Integer, ForeignKey("papers.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    min_words = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ChapterStatus.DRAFT.value)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    paper = relationship("Paper", back_populates="chapters")
    feedback_history = relationship(
        "ChapterFeedback",
        order_by="ChapterFeedback.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class ChapterFeedback(Base):
    """Append-only review history of a chapter."""
    __tablename__ = "chapter_feedback"

    id = Column(Integer, primary_key=True, index=True)
    chapter_id = Column(Integer, ForeignKey("chapters.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    status = Column(String(20), nullable=False)  # status the chapter moved to
    text = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
