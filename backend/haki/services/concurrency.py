# Overview: Locking and retry helpers shared by stock-mutating services.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def begin_write_transaction() -> None:
    """
    Take the database write lock up front for check-then-act sequences.

    SQLite ignores SELECT ... FOR UPDATE, so the whole unit of work runs under
    BEGIN IMMEDIATE there. Other backends rely on lock_for_update().
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB unit of work with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, "database is locked") and
    StaleDataError. Any other exception rolls back and propagates.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
