"""
Database connection and initialization utilities.
"""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from attention_engine.config import project_root

logger = logging.getLogger(__name__)

# Database configuration
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{project_root / 'attention.db'}"  # Default to SQLite
)


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine; SQLite connections may be used from worker threads."""
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
        echo=os.getenv("DB_ECHO", "false").lower() == "true"  # Set DB_ECHO=true for SQL logging
    )


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


# Create engine
engine = create_db_engine()

# Create session factory
SessionLocal = create_session_factory(engine)


def init_db(bind: Engine = engine):
    """Initialize database - create all tables."""
    from attention_engine.db.models import Base
    Base.metadata.create_all(bind=bind)
    logger.info(f"Database initialized at: {bind.url}")

