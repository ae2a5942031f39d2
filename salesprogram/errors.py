# salesprogram/errors.py
from typing import Optional


class EngineError(Exception):
    """Base class for everything the engine raises on purpose."""


class MissingStartDateError(EngineError):
    """Agent has no starting_date, so no week can be scheduled."""

    def __init__(self, agent_id: int):
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} has no starting_date")


class NotFoundError(EngineError):
    def __init__(self, kind: str, ident):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident} not found")


class StoreError(EngineError):
    """The record store could not complete a call."""


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class ValidationError(EngineError):
    """Malformed condition or entry data. Never defaulted silently."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class StartDateLockedError(ValidationError):
    def __init__(self, agent_id: int, week_count: int):
        self.agent_id = agent_id
        self.week_count = week_count
        super().__init__(
            f"Agent {agent_id} already has {week_count} week(s); starting_date can no longer change",
            field="starting_date",
        )
