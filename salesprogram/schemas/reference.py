from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional

class KpiType(str, Enum):
    ACTION = "Action"
    SKILLSET = "Skillset"

class KpiRecord(BaseModel):
    id: int
    kpi_name: str
    kpi_type: KpiType
    kpi_description: Optional[str] = None

    model_config = {"from_attributes": True}

class RequirementRecord(BaseModel):
    id: int
    requirement_name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}

class CodeOfHonorRecord(BaseModel):
    id: int
    code_of_honor_name: str = Field(..., min_length=1)
    explanation: Optional[str] = None

    model_config = {"from_attributes": True}
