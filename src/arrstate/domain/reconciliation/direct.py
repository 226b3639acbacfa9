"""Direct convergence for list-type resources such as import lists.

Instead of an equality-driven diff every desired entry is upserted by name,
and managed entries missing from the desired state, or surplus managed
namesakes, are removed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .apply import apply_changes
from .contracts import Change, ChangeAction, ChangeSet
from .diff import index_current, index_desired

if TYPE_CHECKING:
    from collections.abc import Sequence

    from arrstate.domain.model.resources import Resource

    from .apply import CancelCheck, ChangeCallback
    from .contracts import ApplyResult
    from .kinds import ResourceSpec


def plan_direct(
    current: Sequence[Resource],
    desired: Sequence[Resource],
    spec: ResourceSpec,
    *,
    owner: int | None,
) -> ChangeSet:
    desired_by_key = index_desired(desired, spec)
    current_by_key, surplus = index_current(current, spec, owner)
    changes = ChangeSet()

    for key, wanted in desired_by_key.items():
        name = spec.display_name(wanted)
        observed = current_by_key.get(key)
        if observed is None:
            changes.creates.append(
                Change(
                    kind=spec.kind,
                    action=ChangeAction.CREATE,
                    display_name=name,
                    payload=wanted,
                )
            )
        elif spec.is_owned(observed, owner):
            changes.updates.append(
                Change(
                    kind=spec.kind,
                    action=ChangeAction.UPDATE,
                    display_name=name,
                    payload=wanted,
                    server_id=observed.server_id,
                )
            )
        else:
            changes.skipped.append(
                Change(
                    kind=spec.kind,
                    action=ChangeAction.CREATE,
                    display_name=name,
                    payload=wanted,
                    reason="an unmanaged resource with this name already exists",
                )
            )

    orphans = [
        observed
        for key, observed in current_by_key.items()
        if key not in desired_by_key and spec.is_owned(observed, owner)
    ]
    for observed in [*orphans, *surplus]:
        changes.deletes.append(
            Change(
                kind=spec.kind,
                action=ChangeAction.DELETE,
                display_name=spec.display_name(observed),
                payload=observed,
                server_id=observed.server_id,
            )
        )
    return changes


def apply_direct(
    current: Sequence[Resource],
    desired: Sequence[Resource],
    spec: ResourceSpec,
    *,
    owner: int | None,
    create: ChangeCallback,
    update: ChangeCallback,
    delete: ChangeCallback,
    cancel: CancelCheck | None = None,
) -> ApplyResult:
    """Upsert every desired entry by name and delete managed orphans."""

    changes = plan_direct(current, desired, spec, owner=owner)
    return apply_changes(changes, create=create, update=update, delete=delete, cancel=cancel)
