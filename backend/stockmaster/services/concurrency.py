# Overview: Row locking and retry helpers for read-modify-write operations on the store.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for a read that will be followed by a write.

    NOTE: MySQL/InnoDB honors SELECT ... FOR UPDATE; SQLite ignores it, and two
    deferred transactions can both read the same row before either writes.
    Models that are written this way carry a version_id_col so the losing
    UPDATE matches no row and raises StaleDataError for run_with_retry.

    Rows already in the session are refreshed from the locked read.
    """
    return query.with_for_update().populate_existing()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock wait timeouts) and
    StaleDataError. Domain errors raised by func propagate immediately after
    the session is rolled back.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
    if last_exc:
        raise last_exc
