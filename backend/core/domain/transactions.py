"""
core.domain.transactions — row locking and retry helpers for services.

Status changes read the complaint with ``SELECT ... FOR UPDATE`` so two
staff members cannot interleave a read-modify-write.  Assignment is
guarded by a partial unique index (one active assignment per complaint);
when a concurrent writer wins, the losing attempt is re-run from scratch.

Usage::

    from core.domain.transactions import lock_for_update, run_with_retry

    with transaction.atomic():
        complaint = lock_for_update(Complaint, complaint_id)
        ...

    assignment = run_with_retry(
        _assign_once,
        complaint_id,
        authority,
        attempts=3,
        conflict_message="Complaint is being reassigned concurrently.",
    )
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from django.db import IntegrityError, models, transaction

from core.domain.exceptions import Conflict, NotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=models.Model)


def run_with_retry(
    fn: Callable[..., T],
    *args: Any,
    attempts: int,
    conflict_message: str,
    **kwargs: Any,
) -> T:
    """
    Run ``fn`` in its own atomic block, re-running it when the database
    rejects the commit with an ``IntegrityError``.

    Each attempt is a fresh ``transaction.atomic()`` (a savepoint when
    nested), so a failed attempt leaves no partial writes behind.

    Args:
        fn:               Callable performing the whole read-modify-write.
        attempts:         Maximum number of tries (at least one).
        conflict_message: Message of the ``Conflict`` raised when every
                          attempt failed.

    Returns:
        Whatever ``fn`` returns on the first successful attempt.

    Raises:
        Conflict: If all attempts hit an ``IntegrityError``.
        Any domain exception raised by ``fn`` is propagated unchanged.
    """
    attempts = max(attempts, 1)
    last_error: IntegrityError | None = None
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return fn(*args, **kwargs)
        except IntegrityError as exc:
            last_error = exc
            logger.warning(
                "Integrity conflict in %s (attempt %d/%d): %s",
                getattr(fn, "__name__", fn),
                attempt,
                attempts,
                exc,
            )
    raise Conflict(conflict_message) from last_error


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """Fetch ``model_class`` row ``pk`` with a row lock; call inside ``atomic()``."""
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")
