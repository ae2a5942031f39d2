from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from salesprogram.schemas.rank import RankRecord

class SummaryMetrics(BaseModel):
    weeks_passed: int = Field(0, alias="weeksPassed")
    target_100_percent_weeks: int = Field(0, alias="target100PercentWeeks")
    target_failed_weeks: int = Field(0, alias="targetFailedWeeks")
    coh_warnings: int = Field(0, alias="cohWarnings")

    model_config = {"populate_by_name": True}

class WeekProgress(BaseModel):
    week_number: int
    month_number: int
    status: str

class ProgramProgress(BaseModel):
    agent_id: int
    starting_date: Optional[date]
    current_week: Optional[int]
    weeks_total: int
    weeks_completed: int
    weeks_successful: int
    progress_percent: int
    on_track: bool
    weekly_details: List[WeekProgress] = []

ConditionKind = Literal["kpi_action", "kpi_skillset", "requirement"]

class ConditionResult(BaseModel):
    condition_id: Optional[int]
    kind: ConditionKind
    kpi_id: Optional[int] = None
    requirement_id: Optional[int] = None
    window_start: date
    window_end: date
    actual: Optional[float]  # None when nothing was recorded in the window
    required: float
    passed: bool

class EligibilityResult(BaseModel):
    agent_id: int
    current_rank_id: Optional[int]
    target_rank: Optional[RankRecord]
    eligible: bool
    manual_promotion: bool = False
    auto_promote: bool = False
    tenure_months: Optional[int] = None
    time_requirement_met: Optional[bool] = None
    per_condition: List[ConditionResult] = Field([], alias="perCondition")

    model_config = {"populate_by_name": True}
