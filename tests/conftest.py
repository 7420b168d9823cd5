"""
Pytest configuration and fixtures for outcomes report tests.
"""
import pytest

from factories import (
    ORGANISATION_ID,
    WINDOW_END,
    WINDOW_START,
    default_meetings,
    make_outcome_set,
)
from impact_outcomes.config import reset_config
from impact_outcomes.models import CallerIdentity, ReportWindow
from impact_outcomes.reports import OutcomeReportService
from impact_outcomes.repository import InMemoryRepository, reset_repository


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Isolate configuration and repository singletons between tests."""
    reset_config()
    reset_repository()
    yield
    reset_config()
    reset_repository()


@pytest.fixture
def identity():
    """Caller belonging to the fixture organisation."""
    return CallerIdentity(user_id="u1", organisation_id=ORGANISATION_ID)


@pytest.fixture
def window():
    """The 24 hour report window of the default scenario."""
    return ReportWindow(start=WINDOW_START, end=WINDOW_END)


@pytest.fixture
def outcome_set():
    """Outcome set with mean-aggregated categories."""
    return make_outcome_set()


@pytest.fixture
def meetings():
    """Default scenario meetings keyed by meeting id."""
    return default_meetings()


@pytest.fixture
def repository(outcome_set, meetings):
    """In-memory repository holding the default scenario."""
    return InMemoryRepository(outcome_sets=[outcome_set], meetings=list(meetings.values()))


@pytest.fixture
def report_service(repository):
    """Report service over the default scenario repository."""
    return OutcomeReportService(repository, max_concurrent_fetches=2)
