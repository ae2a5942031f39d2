from typing import List, Optional
from pydantic import BaseModel, Field

class ItemFailure(BaseModel):
    item_id: Optional[int] = None
    label: str
    error: str

class BatchSummary(BaseModel):
    total_agents: int = Field(0, alias="totalUsers")
    agents_with_complete_weeks: int = Field(0, alias="usersWithWeeks")
    agents_with_generated_weeks: int = Field(0, alias="usersWithoutWeeks")
    agents_without_start_date: int = Field(0, alias="usersWithoutStartDate")
    weeks_generated: int = Field(0, alias="weeksGenerated")
    errors: int = 0
    cancelled: bool = False
    failures: List[ItemFailure] = []

    model_config = {"populate_by_name": True}

class ConditionBatchSummary(BaseModel):
    total: int = 0
    created: int = 0
    failed: int = 0
    cancelled: bool = False
    failures: List[ItemFailure] = []
