import asyncio
from datetime import timedelta

import pytest

from salesprogram.config import Settings
from salesprogram.errors import NotFoundError, StartDateLockedError, StoreReadError, ValidationError
from salesprogram.schemas.rank import (
    ActionKpiRow, PromotionConditionBatch, PromotionConditionRecord, PropertySplitTarget,
    RequirementRow, SkillsetKpiRow, UniformTarget
)
from salesprogram.schemas.week import KpiActionEntry, KpiSkillsetEntry, WeekEntries, WeekStatus
from salesprogram.services.engine import ProgramEngine
from tests.fakes import CALLS, PITCH, TRAINING, VIEWINGS, days_ago


@pytest.fixture
def populate(store, make_agent, today):
    def _populate(count, days=20, **kwargs):
        for agent_id in range(1, count + 1):
            agent = make_agent(agent_id=agent_id, starting_date=days_ago(today, days), **kwargs)
            store.agents[agent.id] = agent
    return _populate


@pytest.mark.asyncio
async def test_one_failing_agent_does_not_stop_the_batch(engine, store, populate):
    populate(10)
    store.fail_week_creation_for = {4}

    summary = await engine.generate_missing_weeks_for_all_agents()

    assert summary.total_agents == 10
    assert summary.errors == 1
    assert summary.failures[0].item_id == 4
    assert summary.agents_with_generated_weeks == 9
    assert summary.weeks_generated == 27
    assert store.weeks[4] == []
    assert [w.week_number for w in store.weeks[5]] == [1, 2, 3]


@pytest.mark.asyncio
async def test_agents_without_start_date_and_complete_agents(engine, store, populate, make_agent):
    populate(2)
    store.seed_weeks(2, [1, 2, 3])
    store.agents[3] = make_agent(agent_id=3)

    summary = await engine.generate_missing_weeks_for_all_agents()

    assert summary.total_agents == 3
    assert summary.agents_with_generated_weeks == 1
    assert summary.agents_with_complete_weeks == 1
    assert summary.agents_without_start_date == 1
    assert summary.weeks_generated == 3
    assert summary.errors == 0


@pytest.mark.asyncio
async def test_mentor_filter(engine, store, make_agent, today):
    store.agents[1] = make_agent(agent_id=1, starting_date=days_ago(today, 3), mentor_id=7)
    store.agents[2] = make_agent(agent_id=2, starting_date=days_ago(today, 3), mentor_id=8)

    summary = await engine.generate_missing_weeks_for_all_agents(mentor_id=7)

    assert summary.total_agents == 1
    assert store.weeks[2] == []


@pytest.mark.asyncio
async def test_listing_failure_propagates(engine, store):
    store.fail_list_agents = True
    with pytest.raises(StoreReadError):
        await engine.generate_missing_weeks_for_all_agents()


@pytest.mark.asyncio
async def test_writes_are_strictly_sequential(engine, store, populate):
    populate(4, days=40)

    await engine.generate_missing_weeks_for_all_agents()

    assert store.max_in_flight == 1
    assert len(store.writes) == 4 * 6


@pytest.mark.asyncio
async def test_stop_before_start_reports_cancelled(engine, store, populate):
    populate(3)
    stop = asyncio.Event()
    stop.set()

    summary = await engine.generate_missing_weeks_for_all_agents(stop=stop)

    assert summary.cancelled is True
    assert summary.total_agents == 0
    assert store.writes == []


@pytest.mark.asyncio
async def test_summary_and_weeks_for_agent(engine, store, populate):
    populate(1, days=14)
    store.seed_weeks(1, [1, 2], kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=5, target=5)])
    store.seed_weeks(1, [3], kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=1, target=5)])

    metrics = await engine.get_summary_metrics(1)
    weeks = await engine.list_weeks(1)

    assert (metrics.weeks_passed, metrics.target_failed_weeks) == (2, 1)
    assert [w.status for w in weeks] == [WeekStatus.PERFECT, WeekStatus.PERFECT, WeekStatus.FAILED]


@pytest.mark.asyncio
async def test_unknown_agent(engine):
    with pytest.raises(NotFoundError):
        await engine.get_summary_metrics(404)


@pytest.mark.asyncio
async def test_program_progress(engine, store, populate):
    populate(1, days=14)
    store.seed_weeks(1, [1, 2, 3], kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=5, target=5)])

    progress = await engine.get_program_progress(1)

    assert progress.current_week == 3
    assert progress.weeks_completed == 2
    assert progress.on_track is True


@pytest.mark.asyncio
async def test_evaluate_promotion_reads_conditions_of_next_rank(engine, store, populate):
    populate(1, days=20)
    store.seed_weeks(1, [1, 2, 3], kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=2, target=2)])
    store.conditions = [
        PromotionConditionRecord(id=1, rank_id=101, kpi_id=CALLS.id,
                                 target=PropertySplitTarget(house=6, condo=9), timeframe_days=30),
        PromotionConditionRecord(id=2, rank_id=102, kpi_id=CALLS.id,
                                 target=UniformTarget(count=100), timeframe_days=30),
    ]

    result = await engine.evaluate_promotion(1)

    assert result.target_rank.id == 101
    assert [c.condition_id for c in result.per_condition] == [1]
    assert result.eligible is True
    assert result.auto_promote is True


@pytest.mark.asyncio
async def test_top_rank_has_nothing_to_evaluate(engine, store, populate):
    populate(1, rank_id=102)

    result = await engine.evaluate_promotion(1)

    assert result.eligible is False
    assert result.target_rank is None


@pytest.mark.asyncio
async def test_starting_date_can_change_until_weeks_exist(engine, store, populate, today):
    populate(1)

    agent = await engine.change_starting_date(1, days_ago(today, 3))
    assert agent.starting_date == days_ago(today, 3)

    store.seed_weeks(1, [1])
    with pytest.raises(StartDateLockedError) as info:
        await engine.change_starting_date(1, days_ago(today, 10))
    assert info.value.field == "starting_date"
    assert store.agents[1].starting_date == days_ago(today, 3)


@pytest.mark.asyncio
async def test_update_week_entries(engine, store, populate):
    populate(1)
    store.seed_weeks(1, [1, 2])
    entries = WeekEntries(
        kpi_actions=[KpiActionEntry(kpi_id=CALLS.id, count=4, target=5)],
        kpi_skillsets=[KpiSkillsetEntry(kpi_id=PITCH.id, wording=70, tonality=70, rapport=70, target=60)],
    )

    week = await engine.update_week_entries(1, 2, entries)

    assert week.week_number == 2
    assert week.status == WeekStatus.FAILED
    assert store.writes == [("update_week", week.id)]


@pytest.mark.asyncio
@pytest.mark.parametrize("entries", [
    WeekEntries(kpi_actions=[KpiActionEntry(kpi_id=PITCH.id)]),
    WeekEntries(kpi_skillsets=[KpiSkillsetEntry(kpi_id=CALLS.id)]),
    WeekEntries(requirements=[{"requirement_id": 99}]),
    WeekEntries(violations=[{"rule_id": 99}]),
])
async def test_update_week_entries_rejects_unknown_references(engine, store, populate, entries):
    populate(1)
    store.seed_weeks(1, [1])

    with pytest.raises(ValidationError):
        await engine.update_week_entries(1, 1, entries)
    assert store.writes == []


@pytest.mark.asyncio
async def test_update_missing_week(engine, store, populate):
    populate(1)
    with pytest.raises(NotFoundError):
        await engine.update_week_entries(1, 5, WeekEntries())


def condition_batch(**kwargs):
    data = dict(
        timeframe_days=30,
        action_kpis=[ActionKpiRow(kpi_id=CALLS.id, target=PropertySplitTarget(house=5, condo=8))],
        skillset_kpis=[SkillsetKpiRow(kpi_id=PITCH.id, minimum_score=75)],
        requirements=[RequirementRow(requirement_id=TRAINING.id, target_count=2)],
    )
    data.update(kwargs)
    return PromotionConditionBatch(**data)


@pytest.mark.asyncio
async def test_create_promotion_conditions(engine, store):
    summary = await engine.create_promotion_conditions(101, condition_batch())

    assert (summary.total, summary.created, summary.failed) == (3, 3, 0)
    assert [c.rank_id for c in store.conditions] == [101, 101, 101]
    assert store.conditions[1].minimum_skillset_score == 75
    assert store.conditions[2].target == UniformTarget(count=2)


@pytest.mark.asyncio
async def test_condition_batch_continues_past_failures(engine, store):
    store.fail_condition_for_kpi = {VIEWINGS.id}
    batch = condition_batch(action_kpis=[
        ActionKpiRow(kpi_id=CALLS.id, target=UniformTarget(count=3)),
        ActionKpiRow(kpi_id=VIEWINGS.id, target=UniformTarget(count=1)),
    ])

    summary = await engine.create_promotion_conditions(101, batch)

    assert (summary.total, summary.created, summary.failed) == (4, 3, 1)
    assert summary.failures[0].item_id == VIEWINGS.id


@pytest.mark.asyncio
@pytest.mark.parametrize("batch", [
    condition_batch(skillset_kpis=[SkillsetKpiRow(kpi_id=CALLS.id, minimum_score=50)]),
    condition_batch(action_kpis=[ActionKpiRow(kpi_id=PITCH.id, target=UniformTarget(count=1))]),
    condition_batch(action_kpis=[ActionKpiRow(kpi_id=99, target=UniformTarget(count=1))]),
    condition_batch(requirements=[RequirementRow(requirement_id=99, target_count=1)]),
    PromotionConditionBatch(),
])
async def test_condition_batch_is_validated_before_any_write(engine, store, batch):
    with pytest.raises(ValidationError):
        await engine.create_promotion_conditions(101, batch)
    assert store.writes == []


@pytest.mark.asyncio
async def test_condition_batch_for_unknown_rank(engine, store):
    with pytest.raises(NotFoundError):
        await engine.create_promotion_conditions(555, condition_batch())
    assert store.writes == []


def test_from_settings_converts_delays_to_seconds(store):
    config = Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        PROGRAM_LENGTH_WEEKS=8,
        BATCH_DELAY_MS=250,
        WEEK_CREATE_DELAY_MS=500,
        CONDITION_BATCH_DELAY_MS=300,
        ON_TRACK_PASS_RATIO=0.5,
    )

    engine = ProgramEngine.from_settings(store, config)

    assert engine.program_length == 8
    assert engine.batch_delay == 0.25
    assert engine.week_create_delay == 0.5
    assert engine.condition_batch_delay == 0.3
    assert engine.pass_ratio == 0.5
    generator = engine.week_generator()
    assert (generator.create_delay, generator.program_length) == (0.5, 8)


@pytest.mark.asyncio
async def test_generation_pauses_between_agents_and_weeks(store, populate, today, monkeypatch):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr("salesprogram.services.weeks.asyncio.sleep", fake_sleep)
    populate(2, days=14)
    config = Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:", BATCH_DELAY_MS=1000, WEEK_CREATE_DELAY_MS=500)
    engine = ProgramEngine.from_settings(store, config)
    engine.clock = lambda: today

    summary = await engine.generate_missing_weeks_for_all_agents()

    assert summary.weeks_generated == 6
    assert [s for s in sleeps if s] == [0.5, 0.5, 1.0, 0.5, 0.5]


@pytest.mark.asyncio
async def test_failure_after_some_weeks_were_created(engine, store, populate):
    populate(2, days=20)
    store.fail_at_week = {2: 3}

    summary = await engine.generate_missing_weeks_for_all_agents()

    assert summary.errors == 1
    assert summary.failures[0].item_id == 2
    assert summary.weeks_generated == 3
    assert summary.agents_with_generated_weeks == 1
    # weeks 1 and 2 were written before the failure and stay
    assert [w.week_number for w in store.weeks[2]] == [1, 2]

    store.fail_at_week = {}
    rerun = await engine.generate_missing_weeks_for_all_agents()

    assert rerun.errors == 0
    assert rerun.weeks_generated == 1
    assert [w.week_number for w in store.weeks[2]] == [1, 2, 3]


@pytest.mark.asyncio
async def test_agent_not_started_yet_has_no_missing_weeks(engine, store, make_agent, today):
    store.agents[1] = make_agent(agent_id=1, starting_date=today + timedelta(days=7))

    summary = await engine.generate_missing_weeks_for_all_agents()

    assert summary.agents_with_complete_weeks == 1
    assert summary.weeks_generated == 0
    assert store.weeks[1] == []
