# salesprogram/models/agent.py
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, func
from salesprogram.database import Base

class Agent(Base):
    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    mentor_id = Column(Integer, nullable=True, index=True)
    starting_date = Column(Date, nullable=True)  # locked once weeks exist
    property_type = Column(String, nullable=False, default="Condo")  # House, Condo
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
