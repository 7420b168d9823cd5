"""
Impact Outcomes - Answer Aggregation.

Folds beneficiaries' first and last meeting answers into cross-sectional
first/last/delta statistics at question and category level, recording which
beneficiaries contributed to every value and why others did not.

Architecture Layer: Domain
Principles: Strategy Pattern, Immutable Data, Pure Folds
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field
import structlog

from .extraction import value_for
from .models import AggregationFunction, Category, Meeting, OutcomeSet, Question
from .selection import BeneficiaryRecord

logger = structlog.get_logger(__name__)


class Combiner(ABC):
    """Abstract base for combination strategies."""

    @abstractmethod
    def combine(self, values: list[float]) -> float:
        """Combine a non-empty list of values into one."""


class SumCombiner(Combiner):
    """Sum all values."""

    def combine(self, values: list[float]) -> float:
        return sum(values)


class MeanCombiner(Combiner):
    """Arithmetic mean of values."""

    def combine(self, values: list[float]) -> float:
        if not values:
            raise ValueError("Cannot take the mean of no values")
        return sum(values) / len(values)


_COMBINERS: dict[AggregationFunction, Combiner] = {
    AggregationFunction.MEAN: MeanCombiner(),
    AggregationFunction.SUM: SumCombiner(),
}

_CROSS_SECTIONAL = _COMBINERS[AggregationFunction.MEAN]


def combiner_for(function: AggregationFunction) -> Combiner:
    """Strategy implementing a category's combination function."""
    return _COMBINERS[function]


class BeneficiaryAggregate(BaseModel):
    """A value aggregated over beneficiaries, with its provenance."""
    value: float
    beneficiary_ids: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


class QuestionAggregate(BeneficiaryAggregate):
    """Aggregate associated with a question."""
    question_id: str


class CategoryAggregate(BeneficiaryAggregate):
    """Aggregate associated with a question category."""
    category_id: str


class QuestionAggregates(BaseModel):
    """First, last and delta aggregates for every computable question."""
    first: list[QuestionAggregate] = Field(default_factory=list)
    last: list[QuestionAggregate] = Field(default_factory=list)
    delta: list[QuestionAggregate] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


class CategoryAggregates(BaseModel):
    """First, last and delta aggregates for every computable category."""
    first: list[CategoryAggregate] = Field(default_factory=list)
    last: list[CategoryAggregate] = Field(default_factory=list)
    delta: list[CategoryAggregate] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


class MeetingCategoryAggregate(BaseModel):
    """A category's combined value within a single meeting."""
    category_id: str
    value: float
    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class Statistic:
    """Intermediate cross-sectional statistic before it is attached to a subject."""
    value: float
    beneficiary_ids: list[str]
    warnings: list[str]


@dataclass(frozen=True)
class FirstLastDelta:
    """The three statistics computed for one question or category."""
    first: Statistic | None = None
    last: Statistic | None = None
    delta: Statistic | None = None

    @property
    def excluded(self) -> bool:
        return self.first is None or self.last is None


def category_value(meeting: Meeting, category: Category, members: list[Question]) -> float | None:
    """Combine a meeting's answers to the category's member questions.

    Unanswered members are skipped; None when no member was answered.
    """
    values: list[float] = []
    for question in members:
        value = value_for(meeting, question.id)
        if value is not None:
            values.append(value)
    if not values:
        return None
    return combiner_for(category.aggregation).combine(values)


def category_aggregates_for_meeting(
    meeting: Meeting, outcome_set: OutcomeSet
) -> list[MeetingCategoryAggregate]:
    """Category values for a single meeting, omitting categories with no answers."""
    aggregates: list[MeetingCategoryAggregate] = []
    for category in outcome_set.categories:
        value = category_value(meeting, category, outcome_set.questions_in_category(category.id))
        if value is not None:
            aggregates.append(MeetingCategoryAggregate(category_id=category.id, value=value))
    return aggregates


def summarise(
    first_values: Mapping[str, float],
    last_values: Mapping[str, float],
    roster: list[str],
    subject: str,
) -> FirstLastDelta:
    """Cross-sectional first/last/delta statistics over per-beneficiary values.

    ``roster`` lists every qualifying beneficiary so that those missing from a
    value set are named in that statistic's warnings. The delta is taken over
    beneficiaries present in both value sets only.
    """
    if not first_values or not last_values:
        return FirstLastDelta()

    first = _statistic(first_values, roster,
                       "Beneficiary {} did not answer " + subject + " in their first meeting")
    last = _statistic(last_values, roster,
                      "Beneficiary {} did not answer " + subject + " in their last meeting")

    cohort = sorted(first_values.keys() & last_values.keys())
    if not cohort:
        note = (f"The change could not be calculated as no beneficiary answered {subject} "
                "in both their first and last meeting")
        return FirstLastDelta(
            first=Statistic(first.value, first.beneficiary_ids, [*first.warnings, note]),
            last=Statistic(last.value, last.beneficiary_ids, [*last.warnings, note]),
        )

    delta_value = (_CROSS_SECTIONAL.combine([last_values[b] for b in cohort])
                   - _CROSS_SECTIONAL.combine([first_values[b] for b in cohort]))
    delta = Statistic(
        value=delta_value,
        beneficiary_ids=cohort,
        warnings=[
            f"Beneficiary {b} was excluded from the change as they did not answer "
            f"{subject} in both their first and last meeting"
            for b in roster if b not in cohort
        ],
    )
    return FirstLastDelta(first=first, last=last, delta=delta)


def _statistic(values: Mapping[str, float], roster: list[str], missing: str) -> Statistic:
    contributors = sorted(values)
    return Statistic(
        value=_CROSS_SECTIONAL.combine([values[b] for b in contributors]),
        beneficiary_ids=contributors,
        warnings=[missing.format(b) for b in roster if b not in values],
    )


class QuestionAggregator:
    """Aggregates every question of an outcome set across beneficiaries."""

    def aggregate(
        self, outcome_set: OutcomeSet, records: Mapping[str, BeneficiaryRecord]
    ) -> tuple[QuestionAggregates, list[str]]:
        """Return the question aggregates and the ids of wholly excluded questions."""
        roster = sorted(records)
        first: list[QuestionAggregate] = []
        last: list[QuestionAggregate] = []
        delta: list[QuestionAggregate] = []
        excluded: list[str] = []

        for question in outcome_set.questions:
            first_values: dict[str, float] = {}
            last_values: dict[str, float] = {}
            for ben, record in records.items():
                first_value = value_for(record.first, question.id)
                if first_value is not None:
                    first_values[ben] = first_value
                last_value = value_for(record.last, question.id)
                if last_value is not None:
                    last_values[ben] = last_value

            stats = summarise(first_values, last_values, roster, "this question")
            if stats.excluded:
                logger.debug("question_excluded", question_id=question.id)
                excluded.append(question.id)
                continue
            first.append(QuestionAggregate(question_id=question.id, **_fields(stats.first)))
            last.append(QuestionAggregate(question_id=question.id, **_fields(stats.last)))
            if stats.delta is not None:
                delta.append(QuestionAggregate(question_id=question.id, **_fields(stats.delta)))

        return QuestionAggregates(first=first, last=last, delta=delta), excluded


class CategoryAggregator:
    """Aggregates every category of an outcome set across beneficiaries.

    Each beneficiary's meeting is first reduced to a single category value with
    the category's own combination function; those values are then averaged
    across beneficiaries whatever that function is.
    """

    def aggregate(
        self, outcome_set: OutcomeSet, records: Mapping[str, BeneficiaryRecord]
    ) -> tuple[CategoryAggregates, list[str]]:
        """Return the category aggregates and the ids of wholly excluded categories."""
        roster = sorted(records)
        first: list[CategoryAggregate] = []
        last: list[CategoryAggregate] = []
        delta: list[CategoryAggregate] = []
        excluded: list[str] = []
        first_by_ben = {ben: _values_by_category(r.first, outcome_set) for ben, r in records.items()}
        last_by_ben = {ben: _values_by_category(r.last, outcome_set) for ben, r in records.items()}

        for category in outcome_set.categories:
            members = outcome_set.questions_in_category(category.id)
            if not members:
                logger.debug("category_without_questions", category_id=category.id)
                excluded.append(category.id)
                continue

            first_values = {ben: values[category.id] for ben, values in first_by_ben.items()
                            if category.id in values}
            last_values = {ben: values[category.id] for ben, values in last_by_ben.items()
                           if category.id in values}

            stats = summarise(first_values, last_values, roster, "any question in this category")
            if stats.excluded:
                logger.debug("category_excluded", category_id=category.id)
                excluded.append(category.id)
                continue
            first.append(CategoryAggregate(category_id=category.id, **_fields(stats.first)))
            last.append(CategoryAggregate(category_id=category.id, **_fields(stats.last)))
            if stats.delta is not None:
                delta.append(CategoryAggregate(category_id=category.id, **_fields(stats.delta)))

        return CategoryAggregates(first=first, last=last, delta=delta), excluded


def _fields(stat: Statistic) -> dict[str, object]:
    return {"value": stat.value, "beneficiary_ids": stat.beneficiary_ids, "warnings": stat.warnings}


def _values_by_category(meeting: Meeting, outcome_set: OutcomeSet) -> dict[str, float]:
    return {a.category_id: a.value for a in category_aggregates_for_meeting(meeting, outcome_set)}
