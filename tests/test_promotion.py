from datetime import date

import pytest

from salesprogram.errors import NotFoundError, ValidationError
from salesprogram.schemas.agent import PropertyType
from salesprogram.schemas.rank import (
    PromotionConditionRecord, PropertySplitTarget, UniformTarget
)
from salesprogram.schemas.week import KpiActionEntry, KpiSkillsetEntry, RequirementEntry
from salesprogram.services.promotion import (
    evaluate, months_between, next_rank, trailing_window, weeks_in_window
)
from tests.fakes import CALLS, PITCH, RANKS, TODAY, TRAINING, make_week

KPIS = {kpi.id: kpi for kpi in (CALLS, PITCH)}
REQUIREMENTS = {TRAINING.id: TRAINING}
SENIOR = RANKS[1]
START = date(2025, 6, 2)  # weeks 1..5 start inside a 30 day window ending TODAY


def kpi_condition(**kwargs):
    data = dict(id=1, rank_id=SENIOR.id, kpi_id=CALLS.id,
                target=PropertySplitTarget(house=5, condo=8), timeframe_days=30)
    data.update(kwargs)
    return PromotionConditionRecord(**data)


def requirement_condition(**kwargs):
    data = dict(id=2, rank_id=SENIOR.id, requirement_id=TRAINING.id,
                target=UniformTarget(count=2), timeframe_days=30)
    data.update(kwargs)
    return PromotionConditionRecord(**data)


def history(training_counts=(1,)):
    weeks = [
        make_week(1, 1, START, kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=3, target=3)]),
        make_week(1, 2, START, kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=3, target=3)]),
    ]
    for offset, count in enumerate(training_counts):
        weeks.append(make_week(1, 3 + offset, START, requirements=[
            RequirementEntry(requirement_id=TRAINING.id, count=count, target=1)
        ]))
    return weeks


def test_trailing_window_covers_timeframe_days():
    start, end = trailing_window(TODAY, 30)
    assert end == TODAY
    assert (end - start).days + 1 == 30


def test_weeks_in_window_uses_week_start():
    weeks = [make_week(1, n, date(2025, 5, 19)) for n in (1, 2, 3)]
    inside = weeks_in_window(weeks, (date(2025, 5, 26), TODAY))
    assert [w.week_number for w in inside] == [2, 3]


def test_requirement_short_blocks_promotion(make_agent):
    agent = make_agent(starting_date=START)
    conditions = [kpi_condition(), requirement_condition()]

    result = evaluate(agent, SENIOR, conditions, history((1,)), kpis=KPIS,
                      requirements=REQUIREMENTS, today=TODAY)

    assert result.eligible is False
    kpi_result, req_result = result.per_condition
    assert (kpi_result.actual, kpi_result.required, kpi_result.passed) == (6, 5, True)
    assert (req_result.actual, req_result.required, req_result.passed) == (1, 2, False)


def test_meeting_every_condition_is_eligible(make_agent):
    agent = make_agent(starting_date=START)
    conditions = [kpi_condition(), requirement_condition()]

    result = evaluate(agent, SENIOR, conditions, history((1, 1)), kpis=KPIS,
                      requirements=REQUIREMENTS, today=TODAY)

    assert result.eligible is True
    assert result.auto_promote is True
    assert result.target_rank == SENIOR


def test_property_split_uses_agent_property_type(make_agent):
    agent = make_agent(starting_date=START, property_type=PropertyType.CONDO)

    result = evaluate(agent, SENIOR, [kpi_condition()], history(), kpis=KPIS, today=TODAY)

    assert result.per_condition[0].required == 8
    assert result.eligible is False


def test_counts_outside_window_are_ignored(make_agent):
    agent = make_agent(starting_date=START)
    condition = kpi_condition(timeframe_days=14)

    result = evaluate(agent, SENIOR, [condition], history(), kpis=KPIS, today=TODAY)

    # weeks 1 and 2 started more than 14 days ago
    assert result.per_condition[0].actual == 0
    assert result.eligible is False


def test_skillset_condition_uses_lowest_score(make_agent):
    agent = make_agent(starting_date=START)
    weeks = [
        make_week(1, 1, START, kpi_skillsets=[KpiSkillsetEntry(kpi_id=PITCH.id, wording=90, tonality=90, rapport=90)]),
        make_week(1, 2, START, kpi_skillsets=[KpiSkillsetEntry(kpi_id=PITCH.id, wording=60, tonality=60, rapport=60)]),
    ]
    condition = PromotionConditionRecord(
        id=3, rank_id=SENIOR.id, kpi_id=PITCH.id, minimum_skillset_score=70, timeframe_days=30
    )

    result = evaluate(agent, SENIOR, [condition], weeks, kpis=KPIS, today=TODAY)

    assert result.per_condition[0].kind == "kpi_skillset"
    assert result.per_condition[0].actual == 60
    assert result.eligible is False


def test_skillset_condition_without_scores_fails(make_agent):
    agent = make_agent(starting_date=START)
    condition = PromotionConditionRecord(
        id=3, rank_id=SENIOR.id, kpi_id=PITCH.id, minimum_skillset_score=0, timeframe_days=30
    )

    result = evaluate(agent, SENIOR, [condition], [], kpis=KPIS, today=TODAY)

    assert result.per_condition[0].actual is None
    assert result.eligible is False


def test_empty_condition_set_is_vacuously_eligible(make_agent):
    result = evaluate(make_agent(starting_date=START), SENIOR, [], [], kpis=KPIS, today=TODAY)
    assert result.eligible is True
    assert result.per_condition == []


def test_manual_promotion_rank_reports_but_never_auto_promotes(make_agent):
    lead = RANKS[2]
    result = evaluate(make_agent(starting_date=START, rank_id=101), lead, [], [], kpis=KPIS, today=TODAY)
    assert result.eligible is True
    assert result.manual_promotion is True
    assert result.auto_promote is False


def test_tenure_is_reported(make_agent):
    agent = make_agent(starting_date=date(2025, 4, 1))
    result = evaluate(agent, SENIOR, [], [], kpis=KPIS, today=TODAY)
    assert result.tenure_months == 2
    assert result.time_requirement_met is False
    assert months_between(date(2025, 1, 15), date(2025, 4, 15)) == 3
    assert months_between(date(2025, 1, 15), date(2025, 4, 14)) == 2


def test_tenure_from_month_end_start(make_agent):
    assert months_between(date(2025, 1, 31), date(2025, 2, 28)) == 1
    assert months_between(date(2024, 1, 31), date(2024, 2, 28)) == 0
    assert months_between(date(2024, 1, 31), date(2024, 2, 29)) == 1

    result = evaluate(make_agent(starting_date=date(2025, 3, 31)), SENIOR, [], [], kpis=KPIS, today=TODAY)
    assert result.tenure_months == 3
    assert result.time_requirement_met is True


@pytest.mark.parametrize("condition", [
    PromotionConditionRecord(id=9, rank_id=101, timeframe_days=30, target=UniformTarget(count=1)),
    PromotionConditionRecord(id=9, rank_id=101, kpi_id=1, requirement_id=10, timeframe_days=30,
                             target=UniformTarget(count=1)),
    PromotionConditionRecord(id=9, rank_id=101, kpi_id=99, timeframe_days=30, target=UniformTarget(count=1)),
    PromotionConditionRecord(id=9, rank_id=101, kpi_id=1, timeframe_days=30),
    PromotionConditionRecord(id=9, rank_id=100, kpi_id=1, timeframe_days=30, target=UniformTarget(count=1)),
])
def test_malformed_conditions_raise(condition, make_agent):
    with pytest.raises(ValidationError):
        evaluate(make_agent(starting_date=START), SENIOR, [condition], [], kpis=KPIS, today=TODAY)


def test_next_rank():
    assert next_rank(RANKS, None).id == 100
    assert next_rank(RANKS, 100).id == 101
    assert next_rank(list(reversed(RANKS)), 101).id == 102
    assert next_rank(RANKS, 102) is None
    assert next_rank([], None) is None
    with pytest.raises(NotFoundError):
        next_rank(RANKS, 555)
