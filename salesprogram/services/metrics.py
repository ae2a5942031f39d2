# salesprogram/services/metrics.py
from datetime import date
from typing import Iterable, Optional

from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.metrics import ProgramProgress, SummaryMetrics, WeekProgress
from salesprogram.schemas.week import WeekRecord, WeekResponse, WeekStatus
from salesprogram.services.weeks import find_week_for_date

PASSING = (WeekStatus.PASSED, WeekStatus.PERFECT)


def classify_week(week: WeekRecord) -> WeekStatus:
    if week.is_empty:
        return WeekStatus.PENDING

    actions_met = all(e.count >= e.target for e in week.kpi_actions if e.enabled)
    requirements_met = all(e.count >= e.target for e in week.requirements if e.enabled)
    clean = all(v.resolved for v in week.violations)
    if not (actions_met and requirements_met and clean):
        return WeekStatus.FAILED

    if all(e.score >= e.target for e in week.kpi_skillsets):
        return WeekStatus.PERFECT
    return WeekStatus.PASSED


def with_status(week: WeekRecord) -> WeekResponse:
    return WeekResponse(**week.model_dump(), status=classify_week(week))


def summarize(weeks: Iterable[WeekRecord], today: Optional[date] = None) -> SummaryMetrics:
    """
    Reduce a week history to the card counters.

    Weeks that have not started yet are left out of the pass/fail counts,
    violations are counted wherever they are.
    """
    today = today or date.today()
    passed = perfect = failed = warnings = 0

    for week in weeks:
        warnings += len(week.violations)
        if week.start_date > today:
            continue
        status = classify_week(week)
        if status == WeekStatus.PERFECT:
            perfect += 1
            passed += 1
        elif status == WeekStatus.PASSED:
            passed += 1
        elif status == WeekStatus.FAILED:
            failed += 1

    return SummaryMetrics(
        weeks_passed=passed,
        target_100_percent_weeks=perfect,
        target_failed_weeks=failed,
        coh_warnings=warnings,
    )


def progress(
    agent: AgentRecord,
    weeks: Iterable[WeekRecord],
    today: Optional[date] = None,
    pass_ratio: float = 0.75,
) -> ProgramProgress:
    today = today or date.today()
    weeks = sorted(weeks, key=lambda w: w.week_number)
    statuses = [classify_week(week) for week in weeks]

    completed = [s for week, s in zip(weeks, statuses) if week.end_date < today]
    successful = sum(1 for s in completed if s in PASSING)
    perfect = sum(1 for s in statuses if s == WeekStatus.PERFECT)
    current = find_week_for_date(weeks, today)

    return ProgramProgress(
        agent_id=agent.id,
        starting_date=agent.starting_date,
        current_week=current.week_number if current else None,
        weeks_total=len(weeks),
        weeks_completed=len(completed),
        weeks_successful=successful,
        progress_percent=round(perfect / len(weeks) * 100) if weeks else 0,
        on_track=(successful / len(completed)) >= pass_ratio if completed else True,
        weekly_details=[
            WeekProgress(week_number=week.week_number, month_number=week.month_number, status=s.value)
            for week, s in zip(weeks, statuses)
        ],
    )
