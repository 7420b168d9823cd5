"""
Impact Outcomes - Answer Extraction.

Resolves the numeric value a beneficiary gave to a question in a meeting.
"""
from __future__ import annotations

import structlog

from .models import Meeting

logger = structlog.get_logger(__name__)


def value_for(meeting: Meeting, question_id: str) -> float | None:
    """Numeric answer to the question in the meeting, or None when absent.

    Unanswered questions are common and not an error. Answers of a non-numeric kind
    are reported as absent so that they never enter a numeric aggregate.
    """
    answer = meeting.answer_for(question_id)
    if answer is None:
        return None
    value = answer.numeric_value()
    if value is None:
        logger.debug("non_numeric_answer_skipped", meeting_id=meeting.id,
                     question_id=question_id, answer_type=answer.type)
    return value
