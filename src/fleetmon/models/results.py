"""
Outcome of a collection cycle.

A cycle visits every target and never stops at the first failure, so the
outcome keeps counters for each kind of result and the most recent error.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CollectionOutcome:
    """
    Aggregated result of one collection cycle.

    Attributes:
        succeeded: Targets whose data was collected and stored
        failed: Targets which could not be collected
        skipped: Targets without any relevant active daemon
        last_error: The most recent error encountered, if any
        failed_targets: Identifiers of the failed targets
    """

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    last_error: Optional[Exception] = None
    failed_targets: List[int] = field(default_factory=list)

    def record_success(self) -> None:
        self.succeeded += 1

    def record_skip(self) -> None:
        self.skipped += 1

    def record_failure(self, target_id: int, error: Exception) -> None:
        self.failed += 1
        self.failed_targets.append(target_id)
        self.last_error = error

    @property
    def ok(self) -> bool:
        return self.last_error is None

    def __str__(self) -> str:
        text = f"succeeded={self.succeeded} failed={self.failed} skipped={self.skipped}"
        if self.last_error is not None:
            text += f" last_error={self.last_error}"
        return text
