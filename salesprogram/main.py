# salesprogram/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import exc as sa_exc
from salesprogram.database import engine, Base
from salesprogram.errors import NotFoundError, StartDateLockedError, StoreError, ValidationError
from salesprogram.models import agent, rank, reference, week  # noqa: F401  registers tables
from salesprogram.routers import admin, agents

logger = logging.getLogger(__name__)

app = FastAPI(title="Sales Program Engine", version="1.0")

# Include Routers
app.include_router(agents.router)
app.include_router(admin.router)

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(StartDateLockedError)
async def start_date_locked_handler(request: Request, exc: StartDateLockedError):
    return JSONResponse(status_code=409, content={"detail": exc.message, "field": exc.field})

@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})

# Create DB Tables (for demo only, use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Welcome to the Sales Program Engine"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("salesprogram.main:app", host="0.0.0.0", port=8000, reload=True)
