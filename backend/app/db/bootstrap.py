from __future__ import annotations

import logging

from sqlalchemy import inspect

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "timetable_slots": {
        "id",
        "school_code",
        "class_instance_id",
        "class_date",
        "period_number",
        "slot_type",
        "start_time",
        "end_time",
        "syllabus_chapter_id",
        "syllabus_topic_id",
        "status",
    },
    "syllabi": {"id", "school_code", "class_instance_id", "subject_id"},
    "syllabus_chapters": {"id", "syllabus_id", "chapter_no", "title"},
    "syllabus_topics": {"id", "chapter_id", "topic_no", "title"},
}


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # create_all never alters an existing table; a stale one is caught below.
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
