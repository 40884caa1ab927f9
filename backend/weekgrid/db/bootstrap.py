from __future__ import annotations

import logging

from sqlalchemy import inspect

from weekgrid.db.base import Base
from weekgrid.db.session import engine
import weekgrid.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "timetable_generations": {
        "id",
        "branch",
        "divisions",
        "academic_year",
        "source",
        "status",
        "dropped_count",
        "seed",
        "headers",
        "rows",
        "created_at",
    },
}


def _assert_required_columns() -> None:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                raise RuntimeError(f"Missing required table: {table_name}")
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                raise RuntimeError(f"Missing required columns in {table_name}: {', '.join(missing)}")


def ensure_runtime_schema() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception:
        logger.exception("Runtime schema bootstrap failed")
        raise
