import time
from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from feedback_bank.models.orm import SiteSetting, utcnow

logger = logging.getLogger(__name__)

SITE_LOCKED = "site_locked"
LOCK_TIMESTAMP = "lock_timestamp"

_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}

def get_setting(db: Session, key: str) -> Optional[str]:
    return db.scalar(select(SiteSetting.value).where(SiteSetting.key == key))

def set_setting(db: Session, key: str, value: str) -> None:
    """INSERT ... ON CONFLICT (key) DO UPDATE, so a key never yields two rows."""
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Upsert not supported for dialect {dialect}")
    now = utcnow()
    stmt = insert(SiteSetting).values(key=key, value=value, updated_at=now)
    stmt = stmt.on_conflict_do_update(index_elements=[SiteSetting.key], set_={"value": value, "updated_at": now})
    db.execute(stmt)

def is_locked(db: Session) -> bool:
    # a missing row means the site was never locked
    return get_setting(db, SITE_LOCKED) == "true"

def lock_timestamp(db: Session) -> Optional[str]:
    return get_setting(db, LOCK_TIMESTAMP)

def set_locked(db: Session, locked: bool) -> Optional[str]:
    """Persist the lock flag; locking also stamps the current epoch millis.

    Returns the lock timestamp now stored (unchanged when unlocking).
    """
    set_setting(db, SITE_LOCKED, "true" if locked else "false")
    if locked:
        set_setting(db, LOCK_TIMESTAMP, str(int(time.time() * 1000)))
    db.commit()
    logger.info(f"Site lock set to {locked}")
    return lock_timestamp(db)
