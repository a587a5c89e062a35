"""Completion tracking for the bootstrap batch.

The tracker is built from the exact list of operations dispatched at
startup, so `total` can never drift from what was actually sent. It finishes
exactly once: when the last distinct operation is recorded, when the
fallback timer expires, or when bootstrap is aborted (gcloud missing).
"""

import logging
from typing import Iterable, Set, Tuple

from .events import Operation

logger = logging.getLogger(__name__)


class CompletionTracker:
    """Counts distinct bootstrap outcomes against the dispatched total."""

    def __init__(self, expected: Iterable[Operation]) -> None:
        self._expected = tuple(dict.fromkeys(expected))
        self._seen: Set[Operation] = set()
        self._finished = False
        self.expired = False

    @property
    def expected(self) -> Tuple[Operation, ...]:
        return self._expected

    @property
    def total(self) -> int:
        return len(self._expected)

    @property
    def completed(self) -> int:
        return len(self._seen)

    @property
    def finished(self) -> bool:
        return self._finished

    def record(self, operation: Operation) -> bool:
        """Count one outcome, success or failure.

        Returns:
            True only for the call that completes the batch; duplicates,
            operations outside the batch and late arrivals return False.
        """
        if self._finished:
            logger.debug(f"Ignoring {operation.value} outcome: bootstrap already finished")
            return False
        if operation not in self._expected or operation in self._seen:
            logger.debug(f"Ignoring {operation.value} outcome: not pending in bootstrap")
            return False

        self._seen.add(operation)
        logger.debug(f"Bootstrap progress {self.completed}/{self.total} ({operation.value})")
        if self.completed >= self.total:
            self._finished = True
            return True
        return False

    def expire(self) -> bool:
        """Handle the fallback timer.

        Returns:
            True if the batch was still pending and is now finished by timeout.
        """
        if self._finished:
            return False
        logger.info(
            f"Fallback timer expired with {self.completed}/{self.total} bootstrap operations done"
        )
        self._finished = True
        self.expired = True
        return True

    def abort(self) -> None:
        """Stop counting; no further outcome can complete the batch."""
        self._finished = True
