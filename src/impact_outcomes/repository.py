"""
Impact Outcomes - Meeting Repository.
Implements Repository Pattern with async support for outcome set and meeting lookups.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

import structlog

from .exceptions import AuthorizationError, EntityNotFoundError
from .models import CallerIdentity, Meeting, OutcomeSet

logger = structlog.get_logger(__name__)


class MeetingRepository(ABC):
    """Abstract data access port consumed by the report engine.

    Every call receives the caller identity so that implementations can scope
    visibility; callers must not interpret it.
    """

    @abstractmethod
    async def get_outcome_set(self, outcome_set_id: str, identity: CallerIdentity) -> OutcomeSet: ...
    @abstractmethod
    async def get_meetings_in_range(
        self, outcome_set_id: str, start: datetime, end: datetime, identity: CallerIdentity,
    ) -> list[Meeting]: ...
    @abstractmethod
    async def get_meetings_for_beneficiary(
        self, beneficiary_id: str, outcome_set_id: str, identity: CallerIdentity,
    ) -> list[Meeting]: ...


class InMemoryRepository(MeetingRepository):
    """In-memory implementation for testing and development."""

    def __init__(
        self, outcome_sets: list[OutcomeSet] | None = None, meetings: list[Meeting] | None = None,
    ) -> None:
        self._outcome_sets: dict[str, OutcomeSet] = {o.id: o for o in outcome_sets or []}
        self._meetings: list[Meeting] = list(meetings or [])

    async def get_outcome_set(self, outcome_set_id: str, identity: CallerIdentity) -> OutcomeSet:
        outcome_set = self._outcome_sets.get(outcome_set_id)
        if outcome_set is None:
            raise EntityNotFoundError("OutcomeSet", outcome_set_id)
        self._authorize(outcome_set.organisation_id, identity)
        return outcome_set

    async def get_meetings_in_range(
        self, outcome_set_id: str, start: datetime, end: datetime, identity: CallerIdentity,
    ) -> list[Meeting]:
        return [m for m in self._visible(outcome_set_id, identity) if start <= m.conducted <= end]

    async def get_meetings_for_beneficiary(
        self, beneficiary_id: str, outcome_set_id: str, identity: CallerIdentity,
    ) -> list[Meeting]:
        return [m for m in self._visible(outcome_set_id, identity) if m.beneficiary == beneficiary_id]

    def _visible(self, outcome_set_id: str, identity: CallerIdentity) -> list[Meeting]:
        return [m for m in self._meetings
                if m.outcome_set_id == outcome_set_id
                and m.organisation_id == identity.organisation_id]

    def _authorize(self, organisation_id: str, identity: CallerIdentity) -> None:
        if organisation_id != identity.organisation_id:
            logger.warning("outcome_set_access_denied", user_id=identity.user_id,
                           organisation_id=identity.organisation_id)
            raise AuthorizationError(
                f"User '{identity.user_id}' cannot access organisation '{organisation_id}'"
            )


_repository_instance: MeetingRepository | None = None


def create_repository() -> MeetingRepository:
    """Factory function to create a repository (non-singleton)."""
    return InMemoryRepository()


def get_repository() -> MeetingRepository:
    """Get singleton repository instance."""
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = create_repository()
        logger.info("meeting_repository_created", type="in_memory")
    return _repository_instance


def reset_repository() -> None:
    """Reset the singleton repository (for testing)."""
    global _repository_instance
    _repository_instance = None
