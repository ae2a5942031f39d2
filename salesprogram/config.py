# salesprogram/config.py
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")

    DATABASE_URL: str
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    # Program shape
    PROGRAM_LENGTH_WEEKS: int = Field(12, ge=1)
    WEEKS_PER_MONTH: int = Field(4, ge=1)
    ON_TRACK_PASS_RATIO: float = Field(0.75, ge=0, le=1)

    # Pacing between store writes (the store rate-limits bursts)
    BATCH_DELAY_MS: int = Field(1000, ge=0)
    WEEK_CREATE_DELAY_MS: int = Field(500, ge=0)
    CONDITION_BATCH_DELAY_MS: int = Field(300, ge=0)

    LOG_LEVEL: str = Field("INFO")

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL
        # Ensure asyncpg is used
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def batch_delay(self) -> float:
        return self.BATCH_DELAY_MS / 1000

    @property
    def week_create_delay(self) -> float:
        return self.WEEK_CREATE_DELAY_MS / 1000

    @property
    def condition_batch_delay(self) -> float:
        return self.CONDITION_BATCH_DELAY_MS / 1000

settings = Settings()
