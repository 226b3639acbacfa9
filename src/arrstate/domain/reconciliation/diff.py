"""Generic diff between observed and desired resources of one kind."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from arrstate.config.errors import ConfigurationError

from .contracts import Change, ChangeAction, ChangeSet

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from arrstate.domain.model.resources import Resource

    from .contracts import ResourceKey
    from .kinds import ResourceSpec

log = getLogger(__name__)


class DuplicateKeyError(ConfigurationError):
    """Raised when two desired resources of one kind share an identity key."""

    def __init__(self, kind: str, key: ResourceKey) -> None:
        super().__init__(f"Duplicate {kind} key in desired state: {key!r}")
        self.kind = kind
        self.key = key


def index_desired(
    desired: Iterable[Resource],
    spec: ResourceSpec,
) -> dict[ResourceKey, Resource]:
    """Map desired resources by identity key, rejecting duplicates."""

    indexed: dict[ResourceKey, Resource] = {}
    for resource in desired:
        key = spec.key(resource)
        if key in indexed:
            raise DuplicateKeyError(spec.kind, key)
        indexed[key] = resource
    return indexed


def diff_resources(
    current: Sequence[Resource],
    desired: Sequence[Resource],
    spec: ResourceSpec,
    *,
    owner: int | None,
) -> ChangeSet:
    """Compute the changes converging ``current`` towards ``desired``.

    Observed resources that ``spec`` does not consider owned are never
    updated or deleted. A desired resource whose key is taken by such a
    resource is reported in ``ChangeSet.skipped`` instead of becoming a create
    the service would reject as a duplicate.
    """

    desired_by_key = index_desired(desired, spec)
    current_by_key, owned_duplicates = index_current(current, spec, owner)
    changes = ChangeSet()

    for key, wanted in desired_by_key.items():
        name = spec.display_name(wanted)
        observed = current_by_key.get(key)
        if observed is None:
            if spec.allow_create:
                changes.creates.append(_change(spec, ChangeAction.CREATE, wanted, name))
            else:
                changes.skipped.append(
                    _change(
                        spec, ChangeAction.CREATE, wanted, name, reason="kind cannot be created"
                    )
                )
            continue

        if not spec.is_owned(observed, owner):
            changes.skipped.append(
                _change(
                    spec,
                    ChangeAction.CREATE,
                    wanted,
                    name,
                    reason="an unmanaged resource with this key already exists",
                )
            )
            continue

        if spec.equal(observed, wanted):
            continue
        if not spec.allow_update:
            log.debug(f"Ignoring drift on create-only {spec.kind} {name!r}")
            continue
        changes.updates.append(
            _change(spec, ChangeAction.UPDATE, wanted, name, server_id=observed.server_id)
        )

    for key, observed in current_by_key.items():
        if key in desired_by_key:
            continue
        if not spec.is_owned(observed, owner) or spec.protected(observed):
            continue
        changes.deletes.append(
            _change(
                spec,
                ChangeAction.DELETE,
                observed,
                spec.display_name(observed),
                server_id=observed.server_id,
            )
        )

    for observed in owned_duplicates:
        changes.deletes.append(
            _change(
                spec,
                ChangeAction.DELETE,
                observed,
                spec.display_name(observed),
                server_id=observed.server_id,
                reason="duplicate of another managed resource",
            )
        )

    return changes


def index_current(
    current: Iterable[Resource],
    spec: ResourceSpec,
    owner: int | None,
) -> tuple[dict[ResourceKey, Resource], list[Resource]]:
    """Map observed resources by key and collect surplus managed namesakes.

    The service may hold several resources under one key. The first owned one
    wins; later owned ones are surplus, unowned ones are left alone.
    """

    indexed: dict[ResourceKey, Resource] = {}
    surplus: list[Resource] = []
    for resource in current:
        key = spec.key(resource)
        existing = indexed.get(key)
        if existing is None:
            indexed[key] = resource
            continue
        owned = spec.is_owned(resource, owner)
        if not spec.is_owned(existing, owner):
            if owned:
                indexed[key] = resource
            continue
        if owned and not spec.protected(resource):
            surplus.append(resource)
    return indexed, surplus


def _change(
    spec: ResourceSpec,
    action: ChangeAction,
    payload: Resource,
    name: str,
    *,
    server_id: int | None = None,
    reason: str | None = None,
) -> Change:
    return Change(
        kind=spec.kind,
        action=action,
        display_name=name,
        payload=payload,
        server_id=server_id,
        reason=reason,
    )
