# salesprogram/models/reference.py
from sqlalchemy import Column, Integer, String, Text, DateTime, func
from salesprogram.database import Base

class Kpi(Base):
    __tablename__ = "kpis"

    id = Column(Integer, primary_key=True, index=True)
    kpi_name = Column(String, nullable=False)
    kpi_type = Column(String, nullable=False)  # Action, Skillset
    kpi_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Requirement(Base):
    __tablename__ = "requirements"

    id = Column(Integer, primary_key=True, index=True)
    requirement_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class CodeOfHonorRule(Base):
    __tablename__ = "code_of_honor"

    id = Column(Integer, primary_key=True, index=True)
    code_of_honor_name = Column(String, nullable=False)
    explanation = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
