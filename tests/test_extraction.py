"""
Unit tests for answer extraction.
"""
from factories import WINDOW_END, make_meeting
from impact_outcomes.extraction import value_for
from impact_outcomes.models import IntAnswer, Meeting, TextAnswer


class TestValueFor:
    """Tests for value_for."""

    def test_int_answer(self):
        meeting = make_meeting("M1", "B1", WINDOW_END, {"Q1": 4})

        assert value_for(meeting, "Q1") == 4.0

    def test_zero_is_a_value(self):
        meeting = make_meeting("M1", "B1", WINDOW_END, {"Q1": 0})

        assert value_for(meeting, "Q1") == 0.0

    def test_unanswered(self):
        meeting = make_meeting("M1", "B1", WINDOW_END, {"Q1": 4})

        assert value_for(meeting, "Q2") is None

    def test_text_answer_is_absent(self):
        """Test non-numeric answers are treated as unanswered."""
        meeting = Meeting(
            id="M1", beneficiary="B1", outcome_set_id="qid", conducted=WINDOW_END,
            answers=[TextAnswer(question_id="Q1", answer="later"), IntAnswer(question_id="Q2", answer=2)],
        )

        assert value_for(meeting, "Q1") is None
        assert value_for(meeting, "Q2") == 2.0
