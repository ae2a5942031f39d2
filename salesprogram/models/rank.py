# salesprogram/models/rank.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from salesprogram.database import Base

class Rank(Base):
    __tablename__ = "ranks"

    id = Column(Integer, primary_key=True, index=True)
    rank_name = Column(String, nullable=False)
    rank_level = Column(Integer, nullable=False, unique=True)
    manual_promotion = Column(Boolean, nullable=False, default=False)
    time_requirement_months = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class PromotionCondition(Base):
    __tablename__ = "promotion_conditions"

    id = Column(Integer, primary_key=True, index=True)
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("kpis.id"), nullable=True)
    requirement_id = Column(Integer, ForeignKey("requirements.id"), nullable=True)
    # house == condo unless is_property_specific
    target_count_house = Column(Integer, nullable=False, default=0)
    target_count_condo = Column(Integer, nullable=False, default=0)
    is_property_specific = Column(Boolean, nullable=False, default=False)
    minimum_skillset_score = Column(Integer, nullable=False, default=0)
    timeframe_days = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
