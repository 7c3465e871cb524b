# Overview: Service-layer helpers for stock row locks and id allocation retries.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError

from ..extensions import db


def lock_for_update(query):
    """
    Lock the selected item rows until the request commits.

    Used when a batch of voucher or receive lines reads stock before writing
    it. SQLite ignores FOR UPDATE and serializes writers instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run an id allocation, retrying while the database reports it is locked.

    Each retry rolls the session back, so this only wraps work done before
    the request's first write (next_id is always called first).
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt == attempts:
                raise
            current_app.logger.warning("Row store busy, retry %s of %s", attempt, attempts - 1)
            time.sleep(backoff_base * (2 ** (attempt - 1)))
