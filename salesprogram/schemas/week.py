from enum import Enum
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

class WeekStatus(str, Enum):
    PENDING = "pending"   # no entries recorded yet
    FAILED = "failed"
    PASSED = "passed"
    PERFECT = "100%"      # passed, and every skillset score on target

class KpiActionEntry(BaseModel):
    kpi_id: int
    count: int = Field(0, ge=0)
    target: int = Field(0, ge=0)
    enabled: bool = True

    model_config = {"from_attributes": True}

class KpiSkillsetEntry(BaseModel):
    kpi_id: int
    wording: int = Field(0, ge=0, le=100)
    tonality: int = Field(0, ge=0, le=100)
    rapport: int = Field(0, ge=0, le=100)
    target: int = Field(0, ge=0, le=100)

    model_config = {"from_attributes": True}

    @property
    def score(self) -> float:
        return (self.wording + self.tonality + self.rapport) / 3

class RequirementEntry(BaseModel):
    requirement_id: int
    count: int = Field(0, ge=0)
    target: int = Field(0, ge=0)
    enabled: bool = True

    model_config = {"from_attributes": True}

class ViolationEntry(BaseModel):
    rule_id: int
    remark: Optional[str] = None
    resolved: bool = False

    model_config = {"from_attributes": True}

class WeekEntries(BaseModel):
    kpi_actions: List[KpiActionEntry] = []
    kpi_skillsets: List[KpiSkillsetEntry] = []
    requirements: List[RequirementEntry] = []
    violations: List[ViolationEntry] = []

    @property
    def is_empty(self) -> bool:
        return not (self.kpi_actions or self.kpi_skillsets or self.requirements or self.violations)

class WeekRecord(WeekEntries):
    id: Optional[int] = None
    agent_id: int
    week_number: int = Field(..., ge=1)
    month_number: int = Field(..., ge=1)
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

class WeekResponse(WeekRecord):
    status: WeekStatus
