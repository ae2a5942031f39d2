# salesprogram/models/week.py
from sqlalchemy import (
    Column, Integer, Text, Date, DateTime, Boolean, ForeignKey, UniqueConstraint, func
)
from salesprogram.database import Base

class Week(Base):
    __tablename__ = "weeks"

    id = Column(Integer, primary_key=True, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False, index=True)
    week_number = Column(Integer, nullable=False)
    month_number = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("agent_id", "week_number", name="uq_agent_week_number"),
    )

class WeekKpiAction(Base):
    __tablename__ = "week_kpi_actions"

    id = Column(Integer, primary_key=True, index=True)
    week_id = Column(Integer, ForeignKey("weeks.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("kpis.id"), nullable=False)
    count = Column(Integer, nullable=False, default=0)
    target = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)

class WeekKpiSkillset(Base):
    __tablename__ = "week_kpi_skillsets"

    id = Column(Integer, primary_key=True, index=True)
    week_id = Column(Integer, ForeignKey("weeks.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("kpis.id"), nullable=False)
    wording = Column(Integer, nullable=False, default=0)    # 0-100
    tonality = Column(Integer, nullable=False, default=0)   # 0-100
    rapport = Column(Integer, nullable=False, default=0)    # 0-100
    target = Column(Integer, nullable=False, default=0)

class WeekRequirement(Base):
    __tablename__ = "week_requirements"

    id = Column(Integer, primary_key=True, index=True)
    week_id = Column(Integer, ForeignKey("weeks.id"), nullable=False, index=True)
    requirement_id = Column(Integer, ForeignKey("requirements.id"), nullable=False)
    count = Column(Integer, nullable=False, default=0)
    target = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)

class WeekViolation(Base):
    __tablename__ = "week_violations"

    id = Column(Integer, primary_key=True, index=True)
    week_id = Column(Integer, ForeignKey("weeks.id"), nullable=False, index=True)
    rule_id = Column(Integer, ForeignKey("code_of_honor.id"), nullable=False)
    remark = Column(Text, nullable=True)
    resolved = Column(Boolean, nullable=False, default=False)
