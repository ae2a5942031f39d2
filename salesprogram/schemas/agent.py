from enum import Enum
from datetime import date
from typing import Optional
from pydantic import BaseModel

class PropertyType(str, Enum):
    HOUSE = "House"
    CONDO = "Condo"

class AgentRecord(BaseModel):
    id: int
    name: str
    mentor_id: Optional[int] = None
    starting_date: Optional[date] = None
    property_type: PropertyType = PropertyType.CONDO
    rank_id: Optional[int] = None

    model_config = {"from_attributes": True}

class StartingDateChange(BaseModel):
    starting_date: date
