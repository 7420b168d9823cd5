"""
Impact Outcomes - Meeting Selection.

Pairs every beneficiary measured within a report window with their earliest
recorded meeting and their most recent meeting inside the window.

Architecture Layer: Domain
Principles: Partial Failure Isolation, Bounded Fan-Out, Deterministic Output
"""
from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from .models import CallerIdentity, Meeting
from .repository import MeetingRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BeneficiaryRecord:
    """A beneficiary's first and last meeting for one report computation."""
    beneficiary_id: str
    first: Meeting
    last: Meeting


@dataclass(frozen=True)
class SelectionResult:
    """Qualifying beneficiaries keyed by id in sorted order, plus exclusion warnings."""
    records: dict[str, BeneficiaryRecord] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def _by_id(meetings: Iterable[Meeting]) -> list[Meeting]:
    return sorted(meetings, key=lambda m: m.id)


def select_last_meetings(meetings: Iterable[Meeting]) -> dict[str, Meeting]:
    """Latest conducted meeting per beneficiary; ties go to the lowest meeting id."""
    grouped: dict[str, list[Meeting]] = defaultdict(list)
    for meeting in meetings:
        grouped[meeting.beneficiary].append(meeting)
    return {
        ben: max(_by_id(grouped[ben]), key=lambda m: m.conducted)
        for ben in sorted(grouped)
    }


def select_first_meeting(history: Iterable[Meeting], last: Meeting) -> Meeting:
    """Earliest conducted meeting in the history; ties go to the lowest meeting id.

    The last meeting is always a candidate so an incomplete history can never
    yield a first meeting conducted after it.
    """
    return min(_by_id([*history, last]), key=lambda m: m.conducted)


class MeetingSelector:
    """Resolves first/last meeting pairs, fetching histories concurrently."""

    def __init__(self, repository: MeetingRepository, max_concurrent_fetches: int = 8) -> None:
        self._repository = repository
        self._max_concurrent_fetches = max_concurrent_fetches

    async def select(
        self, outcome_set_id: str, meetings_in_range: list[Meeting], identity: CallerIdentity,
    ) -> SelectionResult:
        """Select first/last meetings for every beneficiary measured in range.

        A failed history fetch or a beneficiary without two distinct meetings only
        excludes that beneficiary; the reason is returned as a warning.
        """
        last_meetings = select_last_meetings(meetings_in_range)
        semaphore = asyncio.Semaphore(self._max_concurrent_fetches)
        outcomes = await asyncio.gather(
            *(self._resolve(ben, last, outcome_set_id, identity, semaphore)
              for ben, last in last_meetings.items()),
            return_exceptions=True,
        )

        result = SelectionResult()
        for ben, outcome in zip(last_meetings, outcomes):
            if isinstance(outcome, BeneficiaryRecord):
                result.records[ben] = outcome
            elif isinstance(outcome, str):
                result.warnings.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error("beneficiary_resolution_failed", beneficiary_id=ben, error=str(outcome))
                result.warnings.append(_system_error_warning(ben))
            else:
                raise outcome

        logger.info(
            "meetings_selected",
            outcome_set_id=outcome_set_id,
            candidates=len(last_meetings),
            qualifying=len(result.records),
            excluded=len(result.warnings),
        )
        return result

    async def _resolve(
        self,
        beneficiary_id: str,
        last: Meeting,
        outcome_set_id: str,
        identity: CallerIdentity,
        semaphore: asyncio.Semaphore,
    ) -> BeneficiaryRecord | str:
        try:
            async with semaphore:
                history = await self._repository.get_meetings_for_beneficiary(
                    beneficiary_id, outcome_set_id, identity
                )
            first = select_first_meeting(history, last)
            concurrent = any(m.id != last.id and m.conducted <= last.conducted for m in history)
        except Exception as e:
            logger.warning("beneficiary_history_unusable",
                           beneficiary_id=beneficiary_id, error=str(e))
            return _system_error_warning(beneficiary_id)

        if first.id != last.id:
            return BeneficiaryRecord(beneficiary_id=beneficiary_id, first=first, last=last)

        if concurrent:
            logger.info("beneficiary_meetings_concurrent", beneficiary_id=beneficiary_id)
            return (f"Beneficiary {beneficiary_id} was not included as their first and last "
                    "meetings were conducted at the same time")
        logger.info("beneficiary_single_meeting", beneficiary_id=beneficiary_id)
        return f"Beneficiary {beneficiary_id} was not included as they only have a single meeting recorded"


def _system_error_warning(beneficiary_id: str) -> str:
    return (f"Could not include beneficiary {beneficiary_id} due to a system error. "
            "Please contact support.")
