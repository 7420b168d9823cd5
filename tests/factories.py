"""
Builders for outcome sets and meetings used across the test suite.

The default scenario has three beneficiaries answering four questions split
over two categories:

    B1: B1M1 (before the window), B1M2 (window end)
    B2: B2M1 (inside the window), B2M2 (window end)
    B3: B3M1 (before the window), B3M2 (inside the window), B3M3 (window end)
"""
from datetime import datetime, timedelta, timezone

from impact_outcomes.models import (
    AggregationFunction,
    Category,
    IntAnswer,
    Meeting,
    OutcomeSet,
    Question,
)

OUTCOME_SET_ID = "qid"
ORGANISATION_ID = "org1"

WINDOW_END = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
WINDOW_START = WINDOW_END - timedelta(hours=24)

QUESTION_IDS = ["Q1", "Q2", "Q3", "Q4"]

_DEFAULT_HISTORY = {
    "B1M1": (WINDOW_START - timedelta(hours=84), [5, 5, 5, 5]),
    "B1M2": (WINDOW_END, [9, 8, 8, 5]),
    "B2M1": (WINDOW_START + timedelta(hours=1), [6, 2, 7, 4]),
    "B2M2": (WINDOW_END, [2, 2, 3, 5]),
    "B3M1": (WINDOW_START - timedelta(hours=1), [1, 2, 3, 4]),
    "B3M2": (WINDOW_START + timedelta(hours=1), [10, 10, 10, 10]),
    "B3M3": (WINDOW_END, [5, 5, 5, 6]),
}


def make_meeting(
    meeting_id: str,
    beneficiary: str,
    conducted: datetime,
    answers: dict[str, int],
    outcome_set_id: str = OUTCOME_SET_ID,
    organisation_id: str = ORGANISATION_ID,
) -> Meeting:
    """Build a meeting with integer answers keyed by question id."""
    return Meeting(
        id=meeting_id,
        beneficiary=beneficiary,
        outcome_set_id=outcome_set_id,
        organisation_id=organisation_id,
        user="u1",
        conducted=conducted,
        created=conducted,
        modified=conducted,
        answers=[IntAnswer(question_id=q, answer=v) for q, v in answers.items()],
    )


def make_outcome_set(
    c1: AggregationFunction = AggregationFunction.MEAN,
    c2: AggregationFunction = AggregationFunction.MEAN,
) -> OutcomeSet:
    """Four Likert questions in categories C1={Q1,Q2} and C2={Q3,Q4}."""
    return OutcomeSet(
        id=OUTCOME_SET_ID,
        organisation_id=ORGANISATION_ID,
        name="Wellbeing",
        questions=[
            Question(id=qid, question=f"{qid}?", category_id="C1" if qid in ("Q1", "Q2") else "C2",
                     options={"minValue": 1, "maxValue": 10})
            for qid in QUESTION_IDS
        ],
        categories=[
            Category(id="C1", name="Confidence", aggregation=c1),
            Category(id="C2", name="Resilience", aggregation=c2),
        ],
    )


def default_meetings() -> dict[str, Meeting]:
    """Default scenario meetings keyed by meeting id."""
    return {
        meeting_id: make_meeting(meeting_id, meeting_id[:2], conducted,
                                 dict(zip(QUESTION_IDS, values)))
        for meeting_id, (conducted, values) in _DEFAULT_HISTORY.items()
    }
