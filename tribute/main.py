from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tribute.config import get_settings
from tribute.db import Base, SessionLocal, engine
from tribute.repositories.balance import BalanceRepository
from tribute.routes.functions import router as functions_router
from tribute.routes.gifts import router as gifts_router
from tribute.routes.pages import router as pages_router
from tribute.utils.errors import BalanceUnavailable, install_exception_handlers
from tribute import models  # noqa: F401

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def init_dev_db() -> None:
    """Create missing tables and seed the balance row. Dev only; prod uses alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with SessionLocal() as session:
        repo = BalanceRepository(session)
        try:
            await repo.get_amount()
        except BalanceUnavailable:
            await repo.set_amount(settings.initial_balance)
            logger.info(f"Seeded balance with {settings.initial_balance}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.env == "dev":
        await init_dev_db()
    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(title="Tribute Gifts", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)
app.include_router(pages_router)
app.include_router(gifts_router)
app.include_router(functions_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
