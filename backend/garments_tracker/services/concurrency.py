# Overview: Row locking and retry helpers for writes that race on the same order.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on backends that honor it.

    NOTE: SQLite ignores the clause; the version_id column on orders still
    catches a lost update there (StaleDataError -> retry).
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run func, rolling back and retrying on lock or optimistic-version conflicts.

    func must re-read whatever it mutates, since each attempt starts from a
    rolled-back session.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
