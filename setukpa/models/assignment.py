# setukpa/models/assignment.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from setukpa.db.base import Base
from setukpa.models.enums import AssignmentStatus


class PaperTemplate(Base):
    __tablename__ = "paper_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # [{"name": "Isi", "structure": [{"title": "BAB I", "minWords": 500}, ...]}, ...]
    pages = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)

    # null activation = active immediately, null deadline = never missed
    activation_date = Column(DateTime(timezone=True), nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)

    status = Column(String(20), nullable=False, default=AssignmentStatus.SCHEDULED.value)

    # null = applies to every batch
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=True, index=True)
    template_id = Column(Integer, ForeignKey("paper_templates.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
