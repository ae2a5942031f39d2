from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field
from salesprogram.schemas.agent import PropertyType

class RankRecord(BaseModel):
    id: int
    rank_name: str
    rank_level: int
    manual_promotion: bool = False
    time_requirement_months: int = Field(0, ge=0)

    model_config = {"from_attributes": True}

class UniformTarget(BaseModel):
    """One count, whatever the agent sells."""
    kind: Literal["uniform"] = "uniform"
    count: int = Field(..., ge=0)

    def for_property(self, property_type: PropertyType) -> int:
        return self.count

class PropertySplitTarget(BaseModel):
    """Separate counts for house and condo agents."""
    kind: Literal["property_split"] = "property_split"
    house: int = Field(..., ge=0)
    condo: int = Field(..., ge=0)

    def for_property(self, property_type: PropertyType) -> int:
        return self.house if property_type == PropertyType.HOUSE else self.condo

CountTarget = Annotated[Union[UniformTarget, PropertySplitTarget], Field(discriminator="kind")]

class PromotionConditionCreate(BaseModel):
    rank_id: int
    kpi_id: Optional[int] = None
    requirement_id: Optional[int] = None
    target: Optional[CountTarget] = None
    minimum_skillset_score: int = Field(0, ge=0, le=100)
    timeframe_days: int = Field(..., ge=1)

class PromotionConditionRecord(PromotionConditionCreate):
    id: int

# Batch form: one rank, one timeframe, rows grouped by condition kind

class ActionKpiRow(BaseModel):
    kpi_id: int = Field(..., ge=1)
    target: CountTarget

class SkillsetKpiRow(BaseModel):
    kpi_id: int = Field(..., ge=1)
    minimum_score: int = Field(..., ge=0, le=100)

class RequirementRow(BaseModel):
    requirement_id: int = Field(..., ge=1)
    target_count: int = Field(..., ge=0)

class PromotionConditionBatch(BaseModel):
    timeframe_days: int = Field(30, ge=1)
    action_kpis: List[ActionKpiRow] = []
    skillset_kpis: List[SkillsetKpiRow] = []
    requirements: List[RequirementRow] = []

    def to_drafts(self, rank_id: int) -> List[PromotionConditionCreate]:
        drafts = [
            PromotionConditionCreate(
                rank_id=rank_id,
                kpi_id=row.kpi_id,
                target=row.target,
                timeframe_days=self.timeframe_days,
            )
            for row in self.action_kpis
        ]
        drafts += [
            PromotionConditionCreate(
                rank_id=rank_id,
                kpi_id=row.kpi_id,
                minimum_skillset_score=row.minimum_score,
                timeframe_days=self.timeframe_days,
            )
            for row in self.skillset_kpis
        ]
        drafts += [
            PromotionConditionCreate(
                rank_id=rank_id,
                requirement_id=row.requirement_id,
                target=UniformTarget(count=row.target_count),
                timeframe_days=self.timeframe_days,
            )
            for row in self.requirements
        ]
        return drafts
