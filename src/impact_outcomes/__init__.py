"""
Impact Outcomes.

Longitudinal outcomes reporting for beneficiary measurement programmes:
- First/last meeting selection per beneficiary with partial failure isolation
- Question and category level first/last/delta aggregates with provenance
- Structured exception hierarchy with correlation tracking
- FastAPI query layer and pydantic-settings configuration
"""

from .aggregations import (
    BeneficiaryAggregate,
    CategoryAggregate,
    CategoryAggregates,
    CategoryAggregator,
    MeetingCategoryAggregate,
    QuestionAggregate,
    QuestionAggregates,
    QuestionAggregator,
    category_aggregates_for_meeting,
)
from .exceptions import (
    AuthorizationError,
    EntityNotFoundError,
    ImpactError,
    InvalidWindowError,
    NoDataInRangeError,
    RepositoryError,
    RepositoryUnavailableError,
)
from .extraction import value_for
from .models import (
    AggregationFunction,
    Answer,
    CallerIdentity,
    Category,
    IntAnswer,
    Meeting,
    OutcomeSet,
    Question,
    QuestionType,
    ReportWindow,
    TextAnswer,
)
from .reports import Excluded, OutcomeReportService, Report, assemble_report
from .repository import InMemoryRepository, MeetingRepository
from .selection import BeneficiaryRecord, MeetingSelector, SelectionResult

__all__ = [
    "AggregationFunction",
    "Answer",
    "AuthorizationError",
    "BeneficiaryAggregate",
    "BeneficiaryRecord",
    "CallerIdentity",
    "Category",
    "CategoryAggregate",
    "CategoryAggregates",
    "CategoryAggregator",
    "EntityNotFoundError",
    "Excluded",
    "ImpactError",
    "InMemoryRepository",
    "IntAnswer",
    "InvalidWindowError",
    "Meeting",
    "MeetingCategoryAggregate",
    "MeetingRepository",
    "MeetingSelector",
    "NoDataInRangeError",
    "OutcomeReportService",
    "OutcomeSet",
    "Question",
    "QuestionAggregate",
    "QuestionAggregates",
    "QuestionAggregator",
    "QuestionType",
    "Report",
    "ReportWindow",
    "RepositoryError",
    "RepositoryUnavailableError",
    "SelectionResult",
    "TextAnswer",
    "assemble_report",
    "category_aggregates_for_meeting",
    "value_for",
]
