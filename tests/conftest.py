from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from agencyops.adapters.sqlalchemy import start_mappers
from agencyops.adapters.sqlalchemy.migrations import upgrade_head
from agencyops.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    SqlAlchemyDedupUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

_CONFIG_VARS = (
    "AGENCYOPS_TIMEZONE",
    "AGENCYOPS_LONG_BREAK_MINUTES",
    "AGENCYOPS_STALE_SESSION_HOURS",
    "AGENCYOPS_SCAN_BATCH_SIZE",
    "AGENCYOPS_UNDO_WINDOW_DAYS",
)


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dedup_uow(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyDedupUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyDedupUnitOfWork:
        return SqlAlchemyDedupUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def attendance_uow(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyAttendanceUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyAttendanceUnitOfWork:
        return SqlAlchemyAttendanceUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
