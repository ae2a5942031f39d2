# salesprogram/store/base.py
from datetime import date
from typing import List, Optional, Protocol

from salesprogram.schemas.agent import AgentRecord
from salesprogram.schemas.rank import PromotionConditionCreate, PromotionConditionRecord, RankRecord
from salesprogram.schemas.reference import CodeOfHonorRecord, KpiRecord, RequirementRecord
from salesprogram.schemas.week import WeekEntries, WeekRecord


class RecordStore(Protocol):
    """
    CRUD collaborator the engine runs against.

    Every method may raise StoreReadError / StoreWriteError. Each write is
    atomic on its own; nothing is held open between calls.
    """

    async def list_agents(self, mentor_id: Optional[int] = None) -> List[AgentRecord]: ...

    async def get_agent(self, agent_id: int) -> AgentRecord: ...

    async def set_agent_starting_date(self, agent_id: int, starting_date: date) -> AgentRecord: ...

    async def list_weeks_for_agent(self, agent_id: int) -> List[WeekRecord]: ...

    async def create_week(
        self,
        agent_id: int,
        week_number: int,
        month_number: int,
        start_date: date,
        end_date: date,
    ) -> WeekRecord: ...

    async def update_week_entries(self, week_id: int, entries: WeekEntries) -> WeekRecord: ...

    async def list_kpis(self) -> List[KpiRecord]: ...

    async def list_requirements(self) -> List[RequirementRecord]: ...

    async def list_code_of_honor_rules(self) -> List[CodeOfHonorRecord]: ...

    async def list_ranks(self) -> List[RankRecord]: ...

    async def list_promotion_conditions(self, rank_id: Optional[int] = None) -> List[PromotionConditionRecord]: ...

    async def create_promotion_condition(self, data: PromotionConditionCreate) -> PromotionConditionRecord: ...
