"""
Impact Outcomes - Report Generation.

Computes the longitudinal outcomes report for an outcome set over a time window:
beneficiaries measured in the window are compared between their first ever and
their last in-window meeting, per question and per category.

Architecture Layer: Domain
Principles: Template Method, Immutable Reports, Partial Failure Isolation
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
import structlog

from .aggregations import (
    CategoryAggregates,
    CategoryAggregator,
    QuestionAggregates,
    QuestionAggregator,
)
from .exceptions import ErrorContext, NoDataInRangeError
from .models import CallerIdentity, ReportWindow
from .repository import MeetingRepository
from .selection import MeetingSelector

logger = structlog.get_logger(__name__)


class Excluded(BaseModel):
    """Questions and categories for which no aggregate could be computed."""
    question_ids: list[str] = Field(default_factory=list)
    category_ids: list[str] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


class Report(BaseModel):
    """Complete first/last/delta outcomes report."""
    outcome_set_id: str
    window_start: datetime
    window_end: datetime
    beneficiary_ids: list[str] = Field(default_factory=list)
    question_aggregates: QuestionAggregates = Field(default_factory=QuestionAggregates)
    category_aggregates: CategoryAggregates = Field(default_factory=CategoryAggregates)
    excluded: Excluded = Field(default_factory=Excluded)
    warnings: list[str] = Field(default_factory=list)
    model_config = ConfigDict(frozen=True)


def assemble_report(
    outcome_set_id: str,
    window: ReportWindow,
    question_aggregates: QuestionAggregates,
    category_aggregates: CategoryAggregates,
    excluded: Excluded,
    warnings: list[str],
) -> Report:
    """Package aggregates into a report.

    The beneficiary roster is every beneficiary contributing to at least one
    aggregate, sorted.
    """
    roster: set[str] = set()
    for collection in (question_aggregates, category_aggregates):
        for aggregate in (*collection.first, *collection.last, *collection.delta):
            roster.update(aggregate.beneficiary_ids)
    return Report(
        outcome_set_id=outcome_set_id,
        window_start=window.start,
        window_end=window.end,
        beneficiary_ids=sorted(roster),
        question_aggregates=question_aggregates,
        category_aggregates=category_aggregates,
        excluded=excluded,
        warnings=list(warnings),
    )


class OutcomeReportService:
    """Service computing outcomes reports against a meeting repository."""

    def __init__(self, repository: MeetingRepository, max_concurrent_fetches: int = 8) -> None:
        self._repository = repository
        self._selector = MeetingSelector(repository, max_concurrent_fetches=max_concurrent_fetches)
        self._question_aggregator = QuestionAggregator()
        self._category_aggregator = CategoryAggregator()
        self._stats = {"reports_generated": 0, "reports_failed": 0}
        logger.info("report_service_initialized", max_concurrent_fetches=max_concurrent_fetches)

    async def compute_report(
        self, window: ReportWindow, outcome_set_id: str, identity: CallerIdentity
    ) -> Report:
        """Compute the outcomes report.

        Raises whatever the repository raised for the outcome set lookup or the
        in-range meeting query, and NoDataInRangeError when no meeting was
        conducted within the window. Every other problem is reported inside the
        returned report.
        """
        logger.info("generating_report", outcome_set_id=outcome_set_id,
                    start=window.start.isoformat(), end=window.end.isoformat())
        try:
            outcome_set = await self._repository.get_outcome_set(outcome_set_id, identity)
            meetings_in_range = await self._repository.get_meetings_in_range(
                outcome_set_id, window.start, window.end, identity
            )
            if not meetings_in_range:
                raise NoDataInRangeError(outcome_set_id, window.start, window.end,
                                         context=ErrorContext().with_operation("compute_report"))
        except Exception:
            self._stats["reports_failed"] += 1
            raise

        selection = await self._selector.select(outcome_set_id, meetings_in_range, identity)
        question_aggregates, excluded_questions = self._question_aggregator.aggregate(
            outcome_set, selection.records
        )
        category_aggregates, excluded_categories = self._category_aggregator.aggregate(
            outcome_set, selection.records
        )
        report = assemble_report(
            outcome_set_id,
            window,
            question_aggregates,
            category_aggregates,
            Excluded(question_ids=excluded_questions, category_ids=excluded_categories),
            selection.warnings,
        )
        self._stats["reports_generated"] += 1

        logger.info(
            "report_generated",
            outcome_set_id=outcome_set_id,
            beneficiaries=len(report.beneficiary_ids),
            warnings=len(report.warnings),
            excluded_questions=len(excluded_questions),
            excluded_categories=len(excluded_categories),
        )
        return report

    async def get_statistics(self) -> dict[str, Any]:
        """Get report service statistics."""
        return dict(self._stats)
