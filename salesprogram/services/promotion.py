# salesprogram/services/promotion.py
from calendar import monthrange
from datetime import date, timedelta
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from salesprogram.errors import NotFoundError, ValidationError
from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.metrics import ConditionKind, ConditionResult, EligibilityResult
from salesprogram.schemas.rank import PromotionConditionCreate, RankRecord
from salesprogram.schemas.reference import KpiRecord, KpiType, RequirementRecord
from salesprogram.schemas.week import WeekRecord


def trailing_window(today: date, timeframe_days: int) -> Tuple[date, date]:
    """The `timeframe_days` calendar days ending with (and including) today."""
    return today - timedelta(days=timeframe_days - 1), today


def weeks_in_window(weeks: Iterable[WeekRecord], window: Tuple[date, date]) -> List[WeekRecord]:
    start, end = window
    return [week for week in weeks if start <= week.start_date <= end]


def months_between(start: date, end: date) -> int:
    """Whole months from start to end; a month-end start completes on the last day of shorter months."""
    months = (end.year - start.year) * 12 + end.month - start.month
    if end.day < min(start.day, monthrange(end.year, end.month)[1]):
        months -= 1
    return max(months, 0)


def next_rank(ranks: Sequence[RankRecord], current_rank_id: Optional[int]) -> Optional[RankRecord]:
    """Rank directly above the current one; the lowest rank for an unranked agent."""
    ordered = sorted(ranks, key=lambda r: r.rank_level)
    if current_rank_id is None:
        return ordered[0] if ordered else None

    current = next((r for r in ordered if r.id == current_rank_id), None)
    if current is None:
        raise NotFoundError("Rank", current_rank_id)
    return next((r for r in ordered if r.rank_level > current.rank_level), None)


def condition_kind(
    condition: PromotionConditionCreate,
    kpis: Mapping[int, KpiRecord],
    requirements: Optional[Mapping[int, RequirementRecord]] = None,
) -> ConditionKind:
    """Classify a condition, raising ValidationError when it is malformed."""
    if (condition.kpi_id is None) == (condition.requirement_id is None):
        raise ValidationError("a condition references exactly one KPI or one requirement", field="kpi_id")

    if condition.requirement_id is not None:
        if requirements is not None and condition.requirement_id not in requirements:
            raise ValidationError(f"unknown requirement {condition.requirement_id}", field="requirement_id")
        if condition.target is None:
            raise ValidationError("requirement conditions need a target count", field="target")
        return "requirement"

    kpi = kpis.get(condition.kpi_id)
    if kpi is None:
        raise ValidationError(f"unknown KPI {condition.kpi_id}", field="kpi_id")
    if kpi.kpi_type == KpiType.SKILLSET:
        return "kpi_skillset"
    if condition.target is None:
        raise ValidationError("action KPI conditions need a target count", field="target")
    return "kpi_action"


def evaluate_condition(
    condition: PromotionConditionCreate,
    kind: ConditionKind,
    agent: AgentRecord,
    history: Iterable[WeekRecord],
    today: date,
) -> ConditionResult:
    window = trailing_window(today, condition.timeframe_days)
    weeks = weeks_in_window(history, window)

    if kind == "kpi_skillset":
        scores = [
            entry.score
            for week in weeks
            for entry in week.kpi_skillsets
            if entry.kpi_id == condition.kpi_id
        ]
        actual = min(scores) if scores else None
        required = condition.minimum_skillset_score
        passed = actual is not None and actual >= required
    else:
        if kind == "kpi_action":
            counts = (
                entry.count
                for week in weeks
                for entry in week.kpi_actions
                if entry.kpi_id == condition.kpi_id
            )
        else:
            counts = (
                entry.count
                for week in weeks
                for entry in week.requirements
                if entry.requirement_id == condition.requirement_id
            )
        actual = sum(counts)
        required = condition.target.for_property(agent.property_type)
        passed = actual >= required

    return ConditionResult(
        condition_id=getattr(condition, "id", None),
        kind=kind,
        kpi_id=condition.kpi_id,
        requirement_id=condition.requirement_id,
        window_start=window[0],
        window_end=window[1],
        actual=actual,
        required=required,
        passed=passed,
    )


def evaluate(
    agent: AgentRecord,
    rank: RankRecord,
    conditions: Iterable[PromotionConditionCreate],
    history: Iterable[WeekRecord],
    *,
    kpis: Mapping[int, KpiRecord],
    requirements: Optional[Mapping[int, RequirementRecord]] = None,
    today: Optional[date] = None,
) -> EligibilityResult:
    """
    Check an agent against every promotion condition of `rank`.

    "Not eligible" is a normal result. Only malformed conditions raise
    (ValidationError). With `rank.manual_promotion` the result is still
    computed but `auto_promote` stays False.
    """
    today = today or date.today()
    history = list(history)

    results = []
    for condition in conditions:
        if condition.rank_id != rank.id:
            raise ValidationError(
                f"condition belongs to rank {condition.rank_id}, not {rank.id}", field="rank_id"
            )
        kind = condition_kind(condition, kpis, requirements)
        results.append(evaluate_condition(condition, kind, agent, history, today))

    eligible = all(result.passed for result in results)

    tenure = None
    time_met = None
    if agent.starting_date is not None:
        tenure = months_between(agent.starting_date, today)
        time_met = tenure >= rank.time_requirement_months

    return EligibilityResult(
        agent_id=agent.id,
        current_rank_id=agent.rank_id,
        target_rank=rank,
        eligible=eligible,
        manual_promotion=rank.manual_promotion,
        auto_promote=eligible and not rank.manual_promotion,
        tenure_months=tenure,
        time_requirement_met=time_met,
        per_condition=results,
    )
