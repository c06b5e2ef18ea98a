"""
Exception types raised by the review scheduler.
"""

from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class ValidationError(SchedulerError):
    """
    Malformed input: missing ids, out-of-range counters, bad payload fields.

    Batch updates reject the offending answer and keep going.
    """

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id


class PersistenceError(SchedulerError):
    """
    Storage failure, timeout or transaction abort.

    The whole transaction has been rolled back, so the call can be retried.
    """


class NotFoundError(SchedulerError):
    """A record that must exist was not found."""


class InvalidStateError(SchedulerError):
    """Spaced-repetition state that violates its invariants (ease < 1.3, interval < 1, ...)."""
