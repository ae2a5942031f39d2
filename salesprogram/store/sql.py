# salesprogram/store/sql.py
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from salesprogram.errors import NotFoundError, StoreReadError, StoreWriteError
from salesprogram.models.agent import Agent
from salesprogram.models.rank import PromotionCondition, Rank
from salesprogram.models.reference import CodeOfHonorRule, Kpi, Requirement
from salesprogram.models.week import (
    Week, WeekKpiAction, WeekKpiSkillset, WeekRequirement, WeekViolation
)
from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.rank import (
    PromotionConditionCreate, PromotionConditionRecord, PropertySplitTarget, RankRecord, UniformTarget
)
from salesprogram.schemas.reference import CodeOfHonorRecord, KpiRecord, RequirementRecord
from salesprogram.schemas.week import (
    KpiActionEntry, KpiSkillsetEntry, RequirementEntry, ViolationEntry, WeekEntries, WeekRecord
)

logger = logging.getLogger(__name__)

# entry collection name -> (table, schema)
ENTRY_TABLES = {
    "kpi_actions": (WeekKpiAction, KpiActionEntry),
    "kpi_skillsets": (WeekKpiSkillset, KpiSkillsetEntry),
    "requirements": (WeekRequirement, RequirementEntry),
    "violations": (WeekViolation, ViolationEntry),
}


def _condition_record(row: PromotionCondition) -> PromotionConditionRecord:
    if row.is_property_specific:
        target = PropertySplitTarget(house=row.target_count_house, condo=row.target_count_condo)
    else:
        target = UniformTarget(count=row.target_count_house)
    return PromotionConditionRecord(
        id=row.id,
        rank_id=row.rank_id,
        kpi_id=row.kpi_id,
        requirement_id=row.requirement_id,
        target=target,
        minimum_skillset_score=row.minimum_skillset_score,
        timeframe_days=row.timeframe_days,
    )


class SqlRecordStore:
    """RecordStore over the async SQLAlchemy models. One session per call."""

    def __init__(self, sessionmaker: async_sessionmaker):
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def _reading(self, what: str):
        try:
            async with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Store read failed (%s): %s", what, exc)
            raise StoreReadError(f"Could not {what}") from exc
        except SchemaError as exc:
            # rows written by older clients, e.g. a KPI typed "Other"
            logger.error("Store returned a malformed record (%s): %s", what, exc)
            raise StoreReadError(f"Could not {what}: malformed record") from exc

    @asynccontextmanager
    async def _writing(self, what: str):
        try:
            async with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Store write failed (%s): %s", what, exc)
            raise StoreWriteError(f"Could not {what}") from exc
        except SchemaError as exc:
            logger.error("Store returned a malformed record (%s): %s", what, exc)
            raise StoreWriteError(f"Could not {what}: malformed record") from exc

    # Agents

    async def list_agents(self, mentor_id: Optional[int] = None) -> List[AgentRecord]:
        async with self._reading("list agents") as db:
            query = select(Agent).order_by(Agent.id)
            if mentor_id is not None:
                query = query.where(Agent.mentor_id == mentor_id)
            result = await db.execute(query)
            return [AgentRecord.model_validate(agent) for agent in result.scalars()]

    async def get_agent(self, agent_id: int) -> AgentRecord:
        async with self._reading(f"fetch agent {agent_id}") as db:
            agent = await db.get(Agent, agent_id)
            if agent is None:
                raise NotFoundError("Agent", agent_id)
            return AgentRecord.model_validate(agent)

    async def set_agent_starting_date(self, agent_id: int, starting_date: date) -> AgentRecord:
        async with self._writing(f"update agent {agent_id}") as db:
            agent = await db.get(Agent, agent_id)
            if agent is None:
                raise NotFoundError("Agent", agent_id)
            agent.starting_date = starting_date
            await db.commit()
            await db.refresh(agent)
            return AgentRecord.model_validate(agent)

    # Weeks

    async def _load_entries(self, db: AsyncSession, week_ids: List[int]) -> Dict[int, dict]:
        entries = defaultdict(lambda: {name: [] for name in ENTRY_TABLES})
        if not week_ids:
            return entries
        for name, (table, schema) in ENTRY_TABLES.items():
            result = await db.execute(
                select(table).where(table.week_id.in_(week_ids)).order_by(table.id)
            )
            for row in result.scalars():
                entries[row.week_id][name].append(schema.model_validate(row))
        return entries

    @staticmethod
    def _week_record(week: Week, entries: dict) -> WeekRecord:
        return WeekRecord(
            id=week.id,
            agent_id=week.agent_id,
            week_number=week.week_number,
            month_number=week.month_number,
            start_date=week.start_date,
            end_date=week.end_date,
            **entries,
        )

    async def list_weeks_for_agent(self, agent_id: int) -> List[WeekRecord]:
        async with self._reading(f"list weeks for agent {agent_id}") as db:
            result = await db.execute(
                select(Week).where(Week.agent_id == agent_id).order_by(Week.week_number)
            )
            weeks = result.scalars().all()
            entries = await self._load_entries(db, [week.id for week in weeks])
            return [self._week_record(week, entries[week.id]) for week in weeks]

    async def create_week(
        self,
        agent_id: int,
        week_number: int,
        month_number: int,
        start_date: date,
        end_date: date,
    ) -> WeekRecord:
        async with self._writing(f"create week {week_number} for agent {agent_id}") as db:
            week = Week(
                agent_id=agent_id,
                week_number=week_number,
                month_number=month_number,
                start_date=start_date,
                end_date=end_date,
            )
            db.add(week)
            await db.commit()
            await db.refresh(week)
            return self._week_record(week, {})

    async def update_week_entries(self, week_id: int, entries: WeekEntries) -> WeekRecord:
        async with self._writing(f"update entries of week {week_id}") as db:
            week = await db.get(Week, week_id)
            if week is None:
                raise NotFoundError("Week", week_id)

            # Replace, not merge: the caller sends the full collections
            for name, (table, _schema) in ENTRY_TABLES.items():
                await db.execute(delete(table).where(table.week_id == week_id))
                for entry in getattr(entries, name):
                    db.add(table(week_id=week_id, **entry.model_dump()))
            await db.commit()
            await db.refresh(week)

            loaded = await self._load_entries(db, [week_id])
            return self._week_record(week, loaded[week_id])

    # Reference data

    async def list_kpis(self) -> List[KpiRecord]:
        async with self._reading("list KPIs") as db:
            result = await db.execute(select(Kpi).order_by(Kpi.id))
            return [KpiRecord.model_validate(kpi) for kpi in result.scalars()]

    async def list_requirements(self) -> List[RequirementRecord]:
        async with self._reading("list requirements") as db:
            result = await db.execute(select(Requirement).order_by(Requirement.id))
            return [RequirementRecord.model_validate(req) for req in result.scalars()]

    async def list_code_of_honor_rules(self) -> List[CodeOfHonorRecord]:
        async with self._reading("list code of honor rules") as db:
            result = await db.execute(select(CodeOfHonorRule).order_by(CodeOfHonorRule.id))
            return [CodeOfHonorRecord.model_validate(rule) for rule in result.scalars()]

    async def list_ranks(self) -> List[RankRecord]:
        async with self._reading("list ranks") as db:
            result = await db.execute(select(Rank).order_by(Rank.rank_level))
            return [RankRecord.model_validate(rank) for rank in result.scalars()]

    # Promotion conditions

    async def list_promotion_conditions(self, rank_id: Optional[int] = None) -> List[PromotionConditionRecord]:
        async with self._reading("list promotion conditions") as db:
            query = select(PromotionCondition).order_by(PromotionCondition.id)
            if rank_id is not None:
                query = query.where(PromotionCondition.rank_id == rank_id)
            result = await db.execute(query)
            return [_condition_record(row) for row in result.scalars()]

    async def create_promotion_condition(self, data: PromotionConditionCreate) -> PromotionConditionRecord:
        house = condo = 0
        property_specific = False
        if isinstance(data.target, PropertySplitTarget):
            house, condo, property_specific = data.target.house, data.target.condo, True
        elif data.target is not None:
            house = condo = data.target.count

        async with self._writing(f"create promotion condition for rank {data.rank_id}") as db:
            row = PromotionCondition(
                rank_id=data.rank_id,
                kpi_id=data.kpi_id,
                requirement_id=data.requirement_id,
                target_count_house=house,
                target_count_condo=condo,
                is_property_specific=property_specific,
                minimum_skillset_score=data.minimum_skillset_score,
                timeframe_days=data.timeframe_days,
            )
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return _condition_record(row)
