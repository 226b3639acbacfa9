"""Shared reconciliation contract components.

This module holds only the value types passed between the diff engine, the
apply executor and the service adapters:
- identity keys and ownership policies
- ``Change`` / ``ChangeSet`` produced by diffing
- ``ApplyResult`` / ``ApplyError`` produced by applying
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from arrstate.domain.model import ResourceKind
    from arrstate.domain.model.resources import Resource


type ResourceKey = Hashable | tuple[Hashable, ...]


class Ownership(StrEnum):
    """How an observed resource is recognized as managed by this tool."""

    TAG = "tag"
    NAME_PREFIX = "name_prefix"
    ADOPT_ALL = "adopt_all"
    SETTINGS = "settings"


class ChangeAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True, kw_only=True)
class Change:
    """One operation against a service.

    Creates carry no ``server_id``; updates and deletes always carry the id of
    the observed resource. ``payload`` is the desired resource for creates and
    updates and the observed resource for deletes.
    """

    kind: ResourceKind
    action: ChangeAction
    display_name: str
    payload: Resource
    server_id: int | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.action is ChangeAction.CREATE and self.server_id is not None:
            raise ValueError("Create changes must not carry a server id")
        if self.action is not ChangeAction.CREATE and self.server_id is None:
            raise ValueError(f"{self.action} changes require a server id")

    def describe(self) -> str:
        suffix = f" (id={self.server_id})" if self.server_id is not None else ""
        return f"{self.action} {self.kind} {self.display_name!r}{suffix}"


@dataclass(slots=True)
class ChangeSet:
    creates: list[Change] = field(default_factory=list[Change])
    updates: list[Change] = field(default_factory=list[Change])
    deletes: list[Change] = field(default_factory=list[Change])
    skipped: list[Change] = field(default_factory=list[Change])

    def extend(self, other: ChangeSet) -> None:
        self.creates.extend(other.creates)
        self.updates.extend(other.updates)
        self.deletes.extend(other.deletes)
        self.skipped.extend(other.skipped)

    def is_empty(self) -> bool:
        """True when nothing would be sent to the service."""

        return not (self.creates or self.updates or self.deletes)

    @property
    def total(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes)

    def __iter__(self) -> Iterator[Change]:
        yield from self.creates
        yield from self.updates
        yield from self.deletes

    def for_kind(self, kind: ResourceKind) -> ChangeSet:
        return ChangeSet(
            creates=[c for c in self.creates if c.kind is kind],
            updates=[c for c in self.updates if c.kind is kind],
            deletes=[c for c in self.deletes if c.kind is kind],
            skipped=[c for c in self.skipped if c.kind is kind],
        )

    def summary(self) -> str:
        parts = [
            f"{len(self.creates)} create(s)",
            f"{len(self.updates)} update(s)",
            f"{len(self.deletes)} delete(s)",
        ]
        if self.skipped:
            parts.append(f"{len(self.skipped)} skipped")
        return ", ".join(parts)


@dataclass(frozen=True, slots=True)
class ApplyError:
    change: Change
    error: Exception

    def __str__(self) -> str:
        return f"{self.change.describe()}: {self.error}"


@dataclass(slots=True)
class ApplyResult:
    applied: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[ApplyError] = field(default_factory=list[ApplyError])

    @property
    def success(self) -> bool:
        return self.failed == 0

    @property
    def attempted(self) -> int:
        return self.applied + self.failed

    def record_success(self) -> None:
        self.applied += 1

    def record_failure(self, change: Change, error: Exception) -> None:
        self.failed += 1
        self.errors.append(ApplyError(change, error))

    def merge(self, other: ApplyResult) -> ApplyResult:
        return ApplyResult(
            applied=self.applied + other.applied,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
            errors=[*self.errors, *other.errors],
        )

    def failures_by_kind(self) -> Counter[ResourceKind]:
        return Counter(error.change.kind for error in self.errors)

