import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def _memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_bootstrap_creates_missing_tables(monkeypatch):
    engine = _memory_engine()
    monkeypatch.setattr(bootstrap, "engine", engine)

    bootstrap.ensure_runtime_schema_compatibility()

    assert set(bootstrap.REQUIRED_COLUMNS) <= set(inspect(engine).get_table_names())
    engine.dispose()


def test_bootstrap_rejects_table_missing_required_columns(monkeypatch):
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE timetable_slots ("
                "id VARCHAR(36) PRIMARY KEY, school_code VARCHAR(50) NOT NULL, "
                "class_instance_id VARCHAR(36) NOT NULL, class_date DATE NOT NULL, "
                "period_number INTEGER NOT NULL, slot_type VARCHAR(6) NOT NULL, "
                "start_time VARCHAR(8) NOT NULL, end_time VARCHAR(8) NOT NULL)"
            )
        )
    monkeypatch.setattr(bootstrap, "engine", engine)

    with pytest.raises(RuntimeError) as excinfo:
        bootstrap.ensure_runtime_schema_compatibility()

    assert "timetable_slots.status" in str(excinfo.value.__cause__)
    engine.dispose()
