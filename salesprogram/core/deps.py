# salesprogram/core/deps.py
from fastapi import Depends
from salesprogram.database import AsyncSessionLocal
from salesprogram.services.engine import ProgramEngine
from salesprogram.store.base import RecordStore
from salesprogram.store.sql import SqlRecordStore


def get_store() -> RecordStore:
    return SqlRecordStore(AsyncSessionLocal)


def get_engine(store: RecordStore = Depends(get_store)) -> ProgramEngine:
    return ProgramEngine.from_settings(store)
