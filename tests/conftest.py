from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from tribute.catalog import DEFAULT_GIFTS, GiftCatalog
from tribute.config import Settings
from tribute.db import Base
from tribute.models import Balance, GiftOrder
from tribute.repositories.balance import BalanceRepository
from tribute.schemas import NotificationRequest
from tribute.services.notifications import NotificationDispatcher
from tribute.services.redemption import RedemptionService
from tribute.utils.errors import NotificationError


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slow running tests")


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "NOTIFICATION_CHANNEL": "none",
        "RESEND_API_KEY": None,
        "NOTIFICATION_EMAIL": None,
        "WHATSAPP_ACCESS_TOKEN": None,
        "WHATSAPP_TO_NUMBER": None,
        "WHATSAPP_PHONE_NUMBER_ID": None,
        "NOTIFY_FUNCTION_URL": None,
        "DEFAULT_DELIVERY_ADDRESS": None,
        "PREFERRED_TIME_REQUIRED": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingDispatcher(NotificationDispatcher):
    def __init__(self, fail: bool = False):
        super().__init__(make_settings())
        self.fail = fail
        self.sent: List[NotificationRequest] = []

    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        if self.fail:
            raise NotificationError("simulated network error")
        self.sent.append(request)
        return {"id": "test"}


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def catalog() -> GiftCatalog:
    return GiftCatalog(DEFAULT_GIFTS)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest_asyncio.fixture
async def sqlite_db_session(tmp_path):
    db_path = tmp_path / "tribute_tests.sqlite"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", future=True)

    async with engine.begin() as conn:
        await conn.run_sync(
            Base.metadata.create_all,
            tables=[Balance.__table__, GiftOrder.__table__],
        )

    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_session(sqlite_db_session):
    await BalanceRepository(sqlite_db_session).set_amount(500)
    return sqlite_db_session


@pytest.fixture
def redemption_service(seeded_session, catalog, dispatcher, settings):
    return RedemptionService(seeded_session, catalog, dispatcher, settings)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def failing_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher(fail=True)
