"""Database engine and table setup for message persistence.

Defaults to a SQLite file under the project data directory. Set
DATABASE_URL to point at another SQLAlchemy-supported database.
"""

import logging
import os
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent.parent.parent / "data"
_DEFAULT_DB = _DATA_DIR / "chat.db"

_engine: Engine | None = None


def get_engine() -> Engine:
    """Get or create the global database engine.

    Returns:
        The shared SQLAlchemy Engine.
    """
    global _engine
    if _engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            _DATA_DIR.mkdir(parents=True, exist_ok=True)
            database_url = f"sqlite:///{_DEFAULT_DB}"
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        _engine = create_engine(database_url, echo=False, connect_args=connect_args)
    return _engine


def init_db(engine: Engine | None = None) -> None:
    """Create all tables if they don't exist."""
    # Register table models on SQLModel.metadata
    from gemini_chat.store import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
    logger.info("Message tables ready")
