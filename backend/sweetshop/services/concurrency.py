# Overview: Retry and locking helpers shared by every service that settles stock or money.

from __future__ import annotations

import time
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


T = TypeVar("T")

TRANSIENT_DB_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(stmt):
    """
    Row lock for read-modify-write on an order or vendor balance.
    SQLite serializes writers anyway and ignores FOR UPDATE.
    """
    return stmt.with_for_update()


def run_with_retry(func: Callable[[], T], *, attempts: int = 3, backoff_base: float = 0.1) -> T:
    """
    Run a whole unit of work (mutations + commit) and retry it when the
    database reports a lock timeout or deadlock.

    The session is rolled back before each retry, so func must rebuild its
    state from the database rather than reuse loaded objects.
    """
    for attempt in range(attempts):
        try:
            return func()
        except TRANSIENT_DB_ERRORS as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            delay = backoff_base * (2 ** attempt)
            current_app.logger.warning(
                "Transient database error (attempt %s/%s), retrying in %.2fs: %s",
                attempt + 1, attempts, delay, exc,
            )
            time.sleep(delay)
        except Exception:
            # Validation failures can surface after a flush
            db.session.rollback()
            raise
    raise RuntimeError("run_with_retry called with attempts < 1")


def commit_with_retry(*, attempts: int = 3, backoff_base: float = 0.1) -> None:
    run_with_retry(db.session.commit, attempts=attempts, backoff_base=backoff_base)
