import logging
from typing import Optional
from fastapi import APIRouter, Depends
from salesprogram.core.auth import Principal, get_current_admin
from salesprogram.core.deps import get_engine
from salesprogram.schemas.batch import BatchSummary, ConditionBatchSummary
from salesprogram.schemas.rank import PromotionConditionBatch
from salesprogram.services.engine import ProgramEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

@router.post("/weeks/generate", response_model=BatchSummary)
async def generate_missing_weeks(
    mentor_id: Optional[int] = None,
    engine: ProgramEngine = Depends(get_engine),
    admin: Principal = Depends(get_current_admin)
):
    logger.info("Week generation requested by %s", admin.subject)
    return await engine.generate_missing_weeks_for_all_agents(mentor_id=mentor_id)

@router.post("/ranks/{rank_id}/conditions/batch", response_model=ConditionBatchSummary)
async def create_rank_conditions(
    rank_id: int,
    batch: PromotionConditionBatch,
    engine: ProgramEngine = Depends(get_engine),
    admin: Principal = Depends(get_current_admin)
):
    logger.info("Promotion condition batch for rank %s requested by %s", rank_id, admin.subject)
    return await engine.create_promotion_conditions(rank_id, batch)
