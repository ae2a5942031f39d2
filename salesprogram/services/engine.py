# salesprogram/services/engine.py
import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional

from salesprogram.config import Settings, settings
from salesprogram.errors import (
    MissingStartDateError, NotFoundError, StartDateLockedError, ValidationError
)
from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.batch import BatchSummary, ConditionBatchSummary, ItemFailure
from salesprogram.schemas.metrics import EligibilityResult, ProgramProgress, SummaryMetrics
from salesprogram.schemas.rank import PromotionConditionBatch, PromotionConditionCreate
from salesprogram.schemas.reference import KpiType
from salesprogram.schemas.week import WeekEntries, WeekResponse
from salesprogram.services import metrics, promotion
from salesprogram.services.batch import run_sequential
from salesprogram.services.weeks import WeekGenerator, WeekGenerationResult
from salesprogram.store.base import RecordStore

logger = logging.getLogger(__name__)


def _describe_condition(draft: PromotionConditionCreate) -> str:
    if draft.kpi_id is not None:
        return f"KPI {draft.kpi_id} condition for rank {draft.rank_id}"
    return f"requirement {draft.requirement_id} condition for rank {draft.rank_id}"


class ProgramEngine:
    """Caller-facing operations: week generation, card metrics, promotion checks."""

    def __init__(
        self,
        store: RecordStore,
        program_length: int = 12,
        weeks_per_month: int = 4,
        batch_delay: float = 0.0,
        week_create_delay: float = 0.0,
        condition_batch_delay: float = 0.0,
        pass_ratio: float = 0.75,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.program_length = program_length
        self.weeks_per_month = weeks_per_month
        self.batch_delay = batch_delay
        self.week_create_delay = week_create_delay
        self.condition_batch_delay = condition_batch_delay
        self.pass_ratio = pass_ratio
        self.clock = clock

    @classmethod
    def from_settings(cls, store: RecordStore, config: Optional[Settings] = None) -> "ProgramEngine":
        config = config or settings
        return cls(
            store,
            program_length=config.PROGRAM_LENGTH_WEEKS,
            weeks_per_month=config.WEEKS_PER_MONTH,
            batch_delay=config.batch_delay,
            week_create_delay=config.week_create_delay,
            condition_batch_delay=config.condition_batch_delay,
            pass_ratio=config.ON_TRACK_PASS_RATIO,
        )

    def week_generator(self) -> WeekGenerator:
        return WeekGenerator(
            self.store,
            program_length=self.program_length,
            weeks_per_month=self.weeks_per_month,
            create_delay=self.week_create_delay,
        )

    # Week generation

    async def generate_missing_weeks_for_all_agents(
        self,
        mentor_id: Optional[int] = None,
        stop: Optional[asyncio.Event] = None,
    ) -> BatchSummary:
        # Listing failures propagate: there is nothing to run without the agents
        agents = await self.store.list_agents(mentor_id)
        logger.info("Starting check for missing weeks across %s agents", len(agents))

        generator = self.week_generator()
        today = self.clock()

        async def process(agent: AgentRecord) -> Optional[WeekGenerationResult]:
            try:
                return await generator.ensure_weeks(agent, today)
            except MissingStartDateError:
                logger.warning("Agent %s has no starting_date, skipping", agent.id)
                return None

        result = await run_sequential(
            agents,
            process,
            delay=self.batch_delay,
            stop=stop,
            describe=lambda agent: f"agent ID {agent.id}",
        )

        without_start = complete = generated_for = weeks_generated = 0
        for outcome in result.succeeded:
            if outcome is None:
                without_start += 1
            elif outcome.created:
                generated_for += 1
                weeks_generated += len(outcome.created)
            else:
                complete += 1

        summary = BatchSummary(
            total_agents=result.attempted,
            agents_with_complete_weeks=complete,
            agents_with_generated_weeks=generated_for,
            agents_without_start_date=without_start,
            weeks_generated=weeks_generated,
            errors=len(result.failed),
            cancelled=result.cancelled,
            failures=[
                ItemFailure(item_id=f.item.id, label=f"agent {f.item.id}", error=str(f.error))
                for f in result.failed
            ],
        )
        logger.info(
            "Week check done: %s agents, %s complete, %s generated (%s weeks), %s skipped, %s errors",
            summary.total_agents,
            summary.agents_with_complete_weeks,
            summary.agents_with_generated_weeks,
            summary.weeks_generated,
            summary.agents_without_start_date,
            summary.errors,
        )
        return summary

    # Per-agent views

    async def list_weeks(self, agent_id: int) -> List[WeekResponse]:
        await self.store.get_agent(agent_id)
        weeks = await self.store.list_weeks_for_agent(agent_id)
        return [metrics.with_status(week) for week in weeks]

    async def get_summary_metrics(self, agent_id: int) -> SummaryMetrics:
        await self.store.get_agent(agent_id)
        weeks = await self.store.list_weeks_for_agent(agent_id)
        return metrics.summarize(weeks, self.clock())

    async def get_program_progress(self, agent_id: int) -> ProgramProgress:
        agent = await self.store.get_agent(agent_id)
        weeks = await self.store.list_weeks_for_agent(agent_id)
        return metrics.progress(agent, weeks, self.clock(), self.pass_ratio)

    async def evaluate_promotion(self, agent_id: int) -> EligibilityResult:
        # Independent reads, safe to issue together
        agent, weeks, kpis, requirements, ranks = await asyncio.gather(
            self.store.get_agent(agent_id),
            self.store.list_weeks_for_agent(agent_id),
            self.store.list_kpis(),
            self.store.list_requirements(),
            self.store.list_ranks(),
        )

        target = promotion.next_rank(ranks, agent.rank_id)
        if target is None:
            logger.info("Agent %s is at the top rank, nothing to evaluate", agent_id)
            return EligibilityResult(
                agent_id=agent.id, current_rank_id=agent.rank_id, target_rank=None, eligible=False
            )

        conditions = await self.store.list_promotion_conditions(target.id)
        return promotion.evaluate(
            agent,
            target,
            conditions,
            weeks,
            kpis={kpi.id: kpi for kpi in kpis},
            requirements={req.id: req for req in requirements},
            today=self.clock(),
        )

    # Writes

    async def update_week_entries(self, agent_id: int, week_number: int, entries: WeekEntries) -> WeekResponse:
        weeks, kpis, requirements, rules = await asyncio.gather(
            self.store.list_weeks_for_agent(agent_id),
            self.store.list_kpis(),
            self.store.list_requirements(),
            self.store.list_code_of_honor_rules(),
        )
        week = next((w for w in weeks if w.week_number == week_number), None)
        if week is None:
            raise NotFoundError("Week", f"{week_number} of agent {agent_id}")

        kpi_types = {kpi.id: kpi.kpi_type for kpi in kpis}
        for entry in entries.kpi_actions:
            if kpi_types.get(entry.kpi_id) != KpiType.ACTION:
                raise ValidationError(f"KPI {entry.kpi_id} is not an Action KPI", field="kpi_actions")
        for entry in entries.kpi_skillsets:
            if kpi_types.get(entry.kpi_id) != KpiType.SKILLSET:
                raise ValidationError(f"KPI {entry.kpi_id} is not a Skillset KPI", field="kpi_skillsets")
        requirement_ids = {req.id for req in requirements}
        for entry in entries.requirements:
            if entry.requirement_id not in requirement_ids:
                raise ValidationError(f"unknown requirement {entry.requirement_id}", field="requirements")
        rule_ids = {rule.id for rule in rules}
        for entry in entries.violations:
            if entry.rule_id not in rule_ids:
                raise ValidationError(f"unknown code of honor rule {entry.rule_id}", field="violations")

        updated = await self.store.update_week_entries(week.id, entries)
        return metrics.with_status(updated)

    async def change_starting_date(self, agent_id: int, starting_date: date) -> AgentRecord:
        # Week numbers are derived from starting_date, so it is frozen once weeks exist
        weeks = await self.store.list_weeks_for_agent(agent_id)
        if weeks:
            raise StartDateLockedError(agent_id, len(weeks))
        return await self.store.set_agent_starting_date(agent_id, starting_date)

    async def create_promotion_conditions(
        self,
        rank_id: int,
        batch: PromotionConditionBatch,
        stop: Optional[asyncio.Event] = None,
    ) -> ConditionBatchSummary:
        ranks, kpis, requirements = await asyncio.gather(
            self.store.list_ranks(),
            self.store.list_kpis(),
            self.store.list_requirements(),
        )
        if rank_id not in {rank.id for rank in ranks}:
            raise NotFoundError("Rank", rank_id)

        drafts = batch.to_drafts(rank_id)
        if not drafts:
            raise ValidationError("batch contains no conditions")

        # Everything is checked before the first write
        kpis_by_id = {kpi.id: kpi for kpi in kpis}
        requirements_by_id = {req.id: req for req in requirements}
        for row in batch.action_kpis:
            kpi = kpis_by_id.get(row.kpi_id)
            if kpi is not None and kpi.kpi_type != KpiType.ACTION:
                raise ValidationError(f"KPI {row.kpi_id} is not an Action KPI", field="action_kpis")
        for row in batch.skillset_kpis:
            kpi = kpis_by_id.get(row.kpi_id)
            if kpi is not None and kpi.kpi_type != KpiType.SKILLSET:
                raise ValidationError(f"KPI {row.kpi_id} is not a Skillset KPI", field="skillset_kpis")
        for draft in drafts:
            promotion.condition_kind(draft, kpis_by_id, requirements_by_id)

        result = await run_sequential(
            drafts,
            self.store.create_promotion_condition,
            delay=self.condition_batch_delay,
            stop=stop,
            describe=_describe_condition,
        )
        logger.info("%s of %s promotion conditions created for rank %s", len(result.succeeded), len(drafts), rank_id)
        return ConditionBatchSummary(
            total=len(drafts),
            created=len(result.succeeded),
            failed=len(result.failed),
            cancelled=result.cancelled,
            failures=[
                ItemFailure(
                    item_id=f.item.kpi_id if f.item.kpi_id is not None else f.item.requirement_id,
                    label=_describe_condition(f.item),
                    error=str(f.error),
                )
                for f in result.failed
            ],
        )
