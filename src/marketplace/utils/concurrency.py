"""Optimistic concurrency for contended aggregates.

Every aggregate carries protean's ``_version``. A write only lands when the
stored version still equals the one the aggregate was read with. A stale
write fails either at ``save_if_unchanged`` (the store already holds a newer
version) or when the unit of work commits (a concurrent writer committed
first). Both surface here and the command is retried from a fresh read.
"""

import time
from functools import wraps

import structlog
from protean.exceptions import ExpectedVersionError

from marketplace import settings
from marketplace.errors import ConcurrentUpdate

logger = structlog.get_logger(__name__)

CONFLICTS = (ConcurrentUpdate, ExpectedVersionError)


def save_if_unchanged(repo, aggregate):
    """Persist the aggregate only if nobody else wrote it since it was read."""
    expected = aggregate._version
    try:
        repo.add(aggregate)
    except ExpectedVersionError as exc:
        raise ConcurrentUpdate(
            f"{aggregate.__class__.__name__} {aggregate.id} was modified concurrently",
            aggregate_id=str(aggregate.id),
            expected_version=expected,
        ) from exc
    return aggregate


def retry_on_conflict(max_attempts=None, backoff=0.02):
    """Re-run the decorated callable when it loses an optimistic-lock race.

    Stack it above ``@handle`` so each attempt runs in a fresh unit of work,
    which is also where commit-time version conflicts are raised.
    Only wrap callables that re-read all state they write.
    """

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            attempts = max_attempts or settings.conflict_retry_attempts()
            attempt = 0
            while True:
                attempt += 1
                try:
                    return fn(*args, **kwargs)
                except CONFLICTS as exc:
                    if attempt >= attempts:
                        raise
                    logger.warning(
                        "concurrent_update_retry",
                        operation=fn.__qualname__,
                        attempt=attempt,
                        error=str(exc),
                        **getattr(exc, "context", {}),
                    )
                    time.sleep(backoff * attempt)

        return wrapper

    return deco
