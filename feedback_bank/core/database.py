from typing import Generator
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from feedback_bank.core.config import settings

logger = logging.getLogger(__name__)

def _connect_args(url: str) -> dict:
    # the sqlite driver refuses cross-thread use unless told otherwise
    return {"check_same_thread": False} if url.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

class Base(DeclarativeBase):
    pass

@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite only honours ON DELETE CASCADE with foreign_keys switched on."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def get_db() -> Generator[Session, None, None]:
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def init_db(bind: Engine = engine) -> None:
    """Create tables if they don't exist."""
    from feedback_bank.models import orm  # noqa: F401  registers the mappers

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables verified")

def close_db() -> None:
    engine.dispose()
