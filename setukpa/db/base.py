# setukpa/db/base.py
from sqlalchemy.orm import declarative_base

Base = declarative_base()

from setukpa.models.user import User, Batch, ExaminerAssignment  # noqa
from setukpa.models.assignment import Assignment, PaperTemplate  # noqa
from setukpa.models.paper import Paper, Chapter, ChapterFeedback  # noqa
from setukpa.models.grade import Grade, ExaminerGrade  # noqa
from setukpa.models.notification import Notification  # noqa
