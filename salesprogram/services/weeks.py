# salesprogram/services/weeks.py
import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from salesprogram.errors import MissingStartDateError
from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.week import WeekRecord
from salesprogram.store.base import RecordStore

logger = logging.getLogger(__name__)


def elapsed_weeks(starting_date: date, today: date, program_length: int) -> int:
    """Number of program weeks that have begun by `today`, clamped to the program length."""
    if starting_date > today:
        return 0
    return min((today - starting_date).days // 7 + 1, program_length)


def week_window(starting_date: date, week_number: int) -> Tuple[date, date]:
    start = starting_date + timedelta(days=7 * (week_number - 1))
    return start, start + timedelta(days=6)


def month_number(week_number: int, weeks_per_month: int = 4) -> int:
    return math.ceil(week_number / weeks_per_month)


def missing_week_numbers(existing: Iterable[int], elapsed: int) -> List[int]:
    present = set(existing)
    return [n for n in range(1, elapsed + 1) if n not in present]


def find_week_for_date(weeks: Iterable[WeekRecord], day: date) -> Optional[WeekRecord]:
    for week in weeks:
        if week.contains(day):
            return week
    return None


@dataclass
class WeekGenerationResult:
    agent_id: int
    elapsed: int
    existing: int
    created: List[WeekRecord] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        # nothing was missing
        return not self.created


class WeekGenerator:
    def __init__(
        self,
        store: RecordStore,
        program_length: int = 12,
        weeks_per_month: int = 4,
        create_delay: float = 0.0,
    ):
        self.store = store
        self.program_length = program_length
        self.weeks_per_month = weeks_per_month
        self.create_delay = create_delay

    async def ensure_weeks(self, agent: AgentRecord, today: Optional[date] = None) -> WeekGenerationResult:
        """
        Create every elapsed week the agent is missing, lowest number first.

        Raises MissingStartDateError when the agent has no starting_date.
        Existing weeks are never touched, so a second call with the same
        `today` creates nothing.
        """
        if agent.starting_date is None:
            raise MissingStartDateError(agent.id)

        today = today or date.today()
        elapsed = elapsed_weeks(agent.starting_date, today, self.program_length)
        existing = await self.store.list_weeks_for_agent(agent.id)
        result = WeekGenerationResult(agent_id=agent.id, elapsed=elapsed, existing=len(existing))

        missing = missing_week_numbers((week.week_number for week in existing), elapsed)
        if not missing:
            logger.info("Agent %s already has weeks 1..%s, nothing to generate", agent.id, elapsed)
            return result

        logger.info("Agent %s is missing weeks %s, generating", agent.id, missing)
        for index, number in enumerate(missing):
            if index and self.create_delay:
                await asyncio.sleep(self.create_delay)
            start, end = week_window(agent.starting_date, number)
            week = await self.store.create_week(
                agent.id,
                number,
                month_number(number, self.weeks_per_month),
                start,
                end,
            )
            result.created.append(week)

        logger.info("Generated %s week(s) for agent %s", len(result.created), agent.id)
        return result
