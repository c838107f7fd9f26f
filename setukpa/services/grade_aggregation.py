"""
Grade aggregation.

Precedence of the score shown to students and in reports:

1. ``Paper.grade`` override (examiner/admin), when set
2. the advisor rubric ``Grade.final_score``
3. the mean of the examiner scores, rounded half-up to an integer
4. nothing graded yet: score 0 with source NONE

Scores are recomputed on every read and never stored.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from setukpa.core.config import settings
from setukpa.core.exceptions import ScoreRangeError

RUBRIC_FIELDS = ("content", "structure", "language", "format")


class ScoreSource(str, enum.Enum):
    OVERRIDE = "OVERRIDE"
    ADVISOR = "ADVISOR"
    EXAMINER = "EXAMINER"
    NONE = "NONE"


@dataclass(frozen=True)
class FinalScore:
    score: Decimal
    source: ScoreSource

    @property
    def is_graded(self) -> bool:
        return self.source != ScoreSource.NONE

    def passed(self, passing_grade: int | None = None) -> bool:
        if not self.is_graded:
            return False
        threshold = settings.PASSING_GRADE if passing_grade is None else passing_grade
        return self.score >= threshold


def default_rubric_maxima() -> dict[str, int]:
    return {
        "content": settings.MAX_CONTENT_SCORE,
        "structure": settings.MAX_STRUCTURE_SCORE,
        "language": settings.MAX_LANGUAGE_SCORE,
        "format": settings.MAX_FORMAT_SCORE,
    }


def _to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def validate_score(field: str, value, maximum) -> Decimal:
    score = _to_decimal(value)
    if score < 0 or score > _to_decimal(maximum):
        raise ScoreRangeError(field, value, maximum)
    return score


def rubric_total(scores: dict, maxima: Optional[dict] = None) -> Decimal:
    """Validate each rubric sub-score against its max and return their sum."""
    maxima = maxima or default_rubric_maxima()
    total = Decimal("0")
    for field in RUBRIC_FIELDS:
        total += validate_score(field, scores[field], maxima[field])
    return total


def combine_examiner_scores(scores: Sequence) -> Optional[Decimal]:
    """Arithmetic mean rounded half-up; ``None`` when no examiner graded."""
    if not scores:
        return None
    total = sum((_to_decimal(s) for s in scores), Decimal("0"))
    return (total / len(scores)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def compute_final_score(paper, advisor_grade=None, examiner_grades: Iterable = ()) -> FinalScore:
    if paper.grade is not None:
        return FinalScore(_to_decimal(paper.grade), ScoreSource.OVERRIDE)

    if advisor_grade is not None and advisor_grade.final_score is not None:
        return FinalScore(_to_decimal(advisor_grade.final_score), ScoreSource.ADVISOR)

    examiner_mean = combine_examiner_scores([eg.score for eg in examiner_grades])
    if examiner_mean is not None:
        return FinalScore(examiner_mean, ScoreSource.EXAMINER)

    return FinalScore(Decimal("0"), ScoreSource.NONE)
