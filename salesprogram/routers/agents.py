from typing import List
from fastapi import APIRouter, Depends
from salesprogram.core.auth import Principal, get_current_principal
from salesprogram.core.deps import get_engine
from salesprogram.schemas.agent import AgentRecord, StartingDateChange
from salesprogram.schemas.metrics import EligibilityResult, ProgramProgress, SummaryMetrics
from salesprogram.schemas.week import WeekEntries, WeekResponse
from salesprogram.services.engine import ProgramEngine

router = APIRouter(prefix="/agents", tags=["agents"])

@router.get("/{agent_id}/weeks", response_model=List[WeekResponse])
async def list_agent_weeks(
    agent_id: int,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.list_weeks(agent_id)

@router.put("/{agent_id}/weeks/{week_number}/entries", response_model=WeekResponse)
async def replace_week_entries(
    agent_id: int,
    week_number: int,
    entries: WeekEntries,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.update_week_entries(agent_id, week_number, entries)

@router.patch("/{agent_id}/starting-date", response_model=AgentRecord)
async def change_starting_date(
    agent_id: int,
    change: StartingDateChange,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.change_starting_date(agent_id, change.starting_date)

@router.get("/{agent_id}/metrics", response_model=SummaryMetrics)
async def get_agent_metrics(
    agent_id: int,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.get_summary_metrics(agent_id)

@router.get("/{agent_id}/progress", response_model=ProgramProgress)
async def get_agent_progress(
    agent_id: int,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.get_program_progress(agent_id)

@router.get("/{agent_id}/promotion", response_model=EligibilityResult)
async def get_agent_promotion(
    agent_id: int,
    engine: ProgramEngine = Depends(get_engine),
    principal: Principal = Depends(get_current_principal)
):
    return await engine.evaluate_promotion(agent_id)
