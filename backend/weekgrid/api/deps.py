from collections.abc import Generator

from sqlalchemy.orm import Session

from weekgrid.db.session import SessionLocal
from weekgrid.services.external_source import TimetableTextSource


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_text_source() -> TimetableTextSource | None:
    # No external generator is wired by default; deployments override this dependency.
    return None
