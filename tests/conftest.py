from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from songbook.adapters.sqlalchemy.migrations import upgrade_head
from songbook.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from songbook.config import SchemaMode
from songbook.domain.intake import create_event_for_booking
from tests.helpers.events import make_booking

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from songbook.domain.model import Event


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(params=[SchemaMode.LEGACY, SchemaMode.NORMALIZED], ids=["legacy", "normalized"])
def schema_mode(request: pytest.FixtureRequest) -> SchemaMode:
    return request.param


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    schema_mode: SchemaMode,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, schema_mode=schema_mode, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def event(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> Event:
    """Event for the default booking, created through intake with access code 123456."""

    with sqlite_unit_of_work() as uow:
        return create_event_for_booking(uow, make_booking(), access_code=123456)
