"""
Impact Outcomes - Domain Models.

Read-only views of the records owned by the outcome store: outcome sets with their
questions and categories, and the meetings in which beneficiaries answered them.

Architecture Layer: Domain
Principles: Immutable Data, Tagged Variants, Type Safety
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from .exceptions import InvalidWindowError


class QuestionType(str, Enum):
    """Kinds of question an outcome set can ask."""
    LIKERT = "likert"


class AggregationFunction(str, Enum):
    """Combination functions available to a category."""
    MEAN = "mean"
    SUM = "sum"


class IntAnswer(BaseModel):
    """Answer containing an integer value."""
    type: Literal["int"] = "int"
    question_id: str
    answer: int = Field(strict=True)
    model_config = ConfigDict(frozen=True)

    def numeric_value(self) -> float | None:
        return float(self.answer)


class TextAnswer(BaseModel):
    """Free text answer; never takes part in numeric aggregation."""
    type: Literal["text"] = "text"
    question_id: str
    answer: str
    model_config = ConfigDict(frozen=True)

    def numeric_value(self) -> float | None:
        return None


Answer = Annotated[Union[IntAnswer, TextAnswer], Field(discriminator="type")]


class Question(BaseModel):
    """A question within an outcome set.

    Scale questions keep their bounds and labels in ``options`` under the keys
    ``minValue``, ``maxValue``, ``minLabel`` and ``maxLabel``.
    """
    id: str
    question: str = ""
    type: QuestionType = QuestionType.LIKERT
    category_id: str | None = None
    deleted: bool = False
    options: dict[str, Any] = Field(default_factory=dict)
    model_config = ConfigDict(frozen=True)

    @property
    def archived(self) -> bool:
        return self.deleted

    @property
    def min_value(self) -> int | None:
        return self.options.get("minValue")

    @property
    def max_value(self) -> int | None:
        return self.options.get("maxValue")

    @property
    def min_label(self) -> str | None:
        return self.options.get("minLabel")

    @property
    def max_label(self) -> str | None:
        return self.options.get("maxLabel")


class Category(BaseModel):
    """Groups a set of questions for aggregation."""
    id: str
    name: str = ""
    description: str | None = None
    aggregation: AggregationFunction = AggregationFunction.MEAN
    model_config = ConfigDict(frozen=True)


class OutcomeSet(BaseModel):
    """A questionnaire used to measure beneficiary outcomes."""
    id: str
    organisation_id: str = ""
    name: str = ""
    description: str | None = None
    questions: list[Question] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)

    def questions_in_category(self, category_id: str) -> list[Question]:
        """Questions assigned to the category, in outcome set order."""
        return [q for q in self.questions if q.category_id == category_id]


class Meeting(BaseModel):
    """One administration of an outcome set to a beneficiary."""
    id: str
    beneficiary: str
    outcome_set_id: str
    organisation_id: str = ""
    user: str = ""
    conducted: AwareDatetime
    created: datetime | None = None
    modified: datetime | None = None
    answers: list[Answer] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)

    def answer_for(self, question_id: str) -> IntAnswer | TextAnswer | None:
        """Return the answer recorded for the question, if any."""
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None


class CallerIdentity(BaseModel):
    """Identity of the caller, passed through to every data access call."""
    user_id: str
    organisation_id: str
    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class ReportWindow:
    """Immutable, inclusive time window for a report."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.utcoffset() is None or self.end.utcoffset() is None:
            raise InvalidWindowError(self.start, self.end, "The time range must include a timezone offset")
        if self.end < self.start:
            raise InvalidWindowError(self.start, self.end)

    def contains(self, dt: datetime) -> bool:
        """Check if datetime falls within this window, both ends included."""
        return self.start <= dt <= self.end
