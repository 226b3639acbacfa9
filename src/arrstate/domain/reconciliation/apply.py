"""Apply executor: turns a change set into service calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .contracts import ApplyResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from .contracts import Change, ChangeSet

log = getLogger(__name__)

type ChangeCallback = Callable[[Change], None]
type CancelCheck = Callable[[], bool]


@dataclass(slots=True)
class Deadline:
    """Cancellation check that fires once ``seconds`` have elapsed."""

    seconds: float
    clock: Callable[[], float] = time.monotonic
    _expires_at: float = field(init=False)

    def __post_init__(self) -> None:
        self._expires_at = self.clock() + self.seconds

    def __call__(self) -> bool:
        return self.clock() >= self._expires_at

    @property
    def remaining(self) -> float:
        return max(0.0, self._expires_at - self.clock())


def apply_changes(
    change_set: ChangeSet,
    *,
    create: ChangeCallback,
    update: ChangeCallback,
    delete: ChangeCallback,
    cancel: CancelCheck | None = None,
) -> ApplyResult:
    """Run every create, then every update, then every delete.

    Each change is attempted once, sequentially. A callback signals failure by
    raising; the failure is recorded and the remaining changes still run. When
    ``cancel`` reports true no further callbacks are issued and the changes not
    yet attempted are counted as skipped.
    """

    result = ApplyResult(skipped=len(change_set.skipped))
    phases: tuple[tuple[list[Change], ChangeCallback], ...] = (
        (change_set.creates, create),
        (change_set.updates, update),
        (change_set.deletes, delete),
    )
    pending = change_set.total

    for changes, callback in phases:
        for change in changes:
            if cancel is not None and cancel():
                log.warning(f"Apply cancelled; skipping {pending} remaining change(s)")
                result.skipped += pending
                return result
            pending -= 1
            try:
                callback(change)
            except Exception as exc:  # noqa: BLE001
                log.warning(f"Failed to {change.describe()}: {exc}")
                result.record_failure(change, exc)
            else:
                log.info(f"Applied {change.describe()}")
                result.record_success()

    return result
