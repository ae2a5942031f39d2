import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


import pytest

from salesprogram.schemas.agent import AgentRecord, PropertyType
from salesprogram.services.engine import ProgramEngine
from tests.fakes import CALLS, PITCH, PUNCTUALITY, RANKS, TODAY, TRAINING, VIEWINGS, FakeStore


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return FakeStore(
        kpis=[CALLS, VIEWINGS, PITCH],
        requirements=[TRAINING],
        rules=[PUNCTUALITY],
        ranks=RANKS,
    )


@pytest.fixture
def engine(store):
    return ProgramEngine(store, program_length=12, clock=lambda: TODAY)


@pytest.fixture
def make_agent():
    def _make(agent_id=1, starting_date=None, property_type=PropertyType.HOUSE, rank_id=100, mentor_id=None):
        return AgentRecord(
            id=agent_id,
            name=f"Agent {agent_id}",
            starting_date=starting_date,
            property_type=property_type,
            rank_id=rank_id,
            mentor_id=mentor_id,
        )
    return _make
