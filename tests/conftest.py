from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from rollcall.config import Settings
from rollcall.core.clock import FixedClock
from rollcall.database import build_engine, build_sessionmaker, init_models
from rollcall.main import create_app
from rollcall.schemas.upload import StaffRow
from rollcall.services.store import AttendanceStore

MONDAY_MORNING = datetime(2025, 6, 2, 8, 30, 0)


def make_settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'rollcall.db'}",
        AUTO_CREATE_TABLES=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(MONDAY_MORNING)


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(make_settings(tmp_path))
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessions(engine):
    return build_sessionmaker(engine)


@pytest.fixture
def store(sessions, clock) -> AttendanceStore:
    return AttendanceStore(sessions, clock)


@pytest.fixture
def client(tmp_path, clock):
    app = create_app(make_settings(tmp_path), clock=clock)
    with TestClient(app) as test_client:
        yield test_client


def staff_row(code, first, last, area="P S PCO", days=None) -> StaffRow:
    return StaffRow(code=code, first_name=first, last_name=last, work_area=area, non_working_days=days)


ROSTER = [
    staff_row("ADAC", "Christina", "Adams", days=["Monday"]),
    staff_row("BROJ", "James", "Brown", area="Science"),
    staff_row("CLAS", "Sarah", "Clark", area="English", days=["Friday"]),
]
