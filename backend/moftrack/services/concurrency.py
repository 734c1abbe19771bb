# Overview: Service-layer operations for concurrency; row locks, per-entity mutexes, retry.

from __future__ import annotations

import threading
import time
from contextlib import ExitStack, contextmanager
from typing import Hashable, Iterator

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


# Fixed pool of mutexes; each (entity_kind, entity_id) key maps onto one stripe.
# Unrelated keys may share a stripe, which only costs some extra waiting.
LOCK_STRIPES = 256
_stripes: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    entity_locks() covers SQLite within a single process.
    """
    return query.with_for_update()


def _stripe_index(key: tuple[str, Hashable]) -> int:
    return hash(key) % LOCK_STRIPES


@contextmanager
def entity_locks(*keys: tuple[str, Hashable]) -> Iterator[None]:
    """
    Hold the in-process mutexes for the given (kind, id) keys.

    Keys are mapped to stripes, and the stripes are de-duplicated and acquired
    in ascending order, so two callers asking for overlapping sets can never
    deadlock. Release happens in reverse order when the block exits, which
    must be after commit.
    """
    indexes = sorted({_stripe_index(key) for key in keys})
    with ExitStack() as stack:
        for index in indexes:
            mutex = _stripes[index]
            mutex.acquire()
            stack.callback(mutex.release)
        yield


def run_with_retry(
    func,
    *,
    attempts: int = 3,
    backoff_base: float = 0.1,
    retry_on: tuple[type[BaseException], ...] = (OperationalError, StaleDataError),
):
    """
    Execute a DB operation with retry on concurrency-related failures.

    By default retries on OperationalError (locks) and StaleDataError
    (optimistic locking conflicts). Domain errors are never in retry_on
    and propagate on the first attempt.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
