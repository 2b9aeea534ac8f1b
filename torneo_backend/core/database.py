# torneo_backend/core/database.py
# SQLite storage for seed scripts. Engine services never open a session:
# they take records in and hand new records back for the caller to store.

import os
from typing import Iterable, Optional

from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session

import torneo_backend.models  # noqa: F401  (registers every table on SQLModel.metadata)
from torneo_backend.core.logging_config import get_logger

logger = get_logger(__name__)

# --- Database URL (in-memory unless configured) ---
SYNC_DATABASE_URL = os.getenv("TORNEO_DATABASE_URL", "sqlite://")


def get_sync_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    return create_sync_engine(url or SYNC_DATABASE_URL, echo=echo, future=True)


def init_db(engine: Engine) -> None:
    """Create tables if they don't exist."""
    SQLModel.metadata.create_all(engine)


def get_sync_session(engine: Engine) -> Session:
    return Session(engine)


def save_records(session: Session, *collections: Iterable[SQLModel]) -> int:
    """Merges every record of the given collections and commits once. Returns how many were saved."""
    count = 0
    for records in collections:
        for record in records:
            session.merge(record)
            count += 1
    session.commit()
    logger.info(f"💾 Saved {count} records")
    return count
