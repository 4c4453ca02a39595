"""Generate database session"""

from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessmate.core.config import load_settings
from chessmate.db.schema import Base


def create_db_engine(database_url: str | None = None) -> Engine:
    """Engine for the configured database (CHESSMATE_DATABASE_URL). All tables get created if missing."""
    url = database_url or load_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(engine: Engine | None = None) -> Generator[Session, None, None]:
    session_factory = sessionmaker(bind=engine or create_db_engine())
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
