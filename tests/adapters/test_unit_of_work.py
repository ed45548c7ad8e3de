from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from songbook.adapters.sqlalchemy import (
    LegacySchemaBridge,
    NormalizedSchemaBridge,
    SqlAlchemyUnitOfWork,
    StartupError,
    shutdown,
    startup,
)
from songbook.adapters.sqlalchemy.unit_of_work import configured_schema_mode, is_started
from songbook.config import SchemaMode
from tests.helpers.events import make_booking

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def _reset_adapter() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_twice_requires_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, schema_mode=SchemaMode.LEGACY)

    with pytest.raises(StartupError):
        startup(engine=sqlite_engine)

    startup(engine=sqlite_engine, schema_mode=SchemaMode.NORMALIZED, force=True)
    assert configured_schema_mode() is SchemaMode.NORMALIZED


def test_schema_mode_read_from_environment(
    sqlite_engine: Engine, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SONGBOOK_SCHEMA_MODE", "normalized")
    startup(engine=sqlite_engine)

    with SqlAlchemyUnitOfWork() as uow:
        assert isinstance(uow.repositories.records, NormalizedSchemaBridge)


def test_legacy_flag_fallback(sqlite_engine: Engine, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SONGBOOK_SCHEMA_MODE", raising=False)
    monkeypatch.setenv("USE_NORMALIZED_TABLES", "false")
    startup(engine=sqlite_engine)

    with SqlAlchemyUnitOfWork() as uow:
        assert isinstance(uow.repositories.records, LegacySchemaBridge)


def test_exception_rolls_back_pending_writes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, schema_mode=SchemaMode.LEGACY)
    booking = make_booking()

    with pytest.raises(RuntimeError, match="boom"), SqlAlchemyUnitOfWork() as uow:
        uow.repositories.bookings.add(booking)
        raise RuntimeError("boom")

    with SqlAlchemyUnitOfWork() as uow:
        assert uow.repositories.bookings.get(booking.record_id) is None


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, schema_mode=SchemaMode.LEGACY)
    uow = SqlAlchemyUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
