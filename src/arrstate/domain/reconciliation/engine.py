"""Reconciliation pass for one service instance.

Flow:
1) validate the desired state (no network)
2) resolve the ownership tag (``ensure`` when applying, ``resolve`` when planning)
3) fetch current resources per kind and diff them in ``KIND_ORDER``
4) apply creates, updates, deletes; then converge import lists directly

Cancellation is checked before the tag is resolved, before each fetch and
before each change. Declared kinds that were never fetched end up in
``ReconciliationPlan.unplanned`` and count as skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arrstate.config.errors import ConfigurationError
from arrstate.domain.model import DESIRED_STATE_VERSION, ResourceKind

from .apply import apply_changes
from .contracts import ApplyResult, ChangeSet, Ownership
from .diff import diff_resources, index_desired
from .direct import plan_direct
from .kinds import DEFAULT_SPECS, DIRECT_KINDS, KIND_ORDER, MANAGED_NAME_PREFIX
from .ownership import OWNERSHIP_TAG, OwnershipTagManager, TagNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from arrstate.domain.model import App, DesiredState, ServiceInfo
    from arrstate.domain.model.resources import Resource
    from arrstate.domain.ports import ServiceAdapter

    from .apply import CancelCheck
    from .kinds import ResourceSpec

log = getLogger(__name__)


class UnsupportedResourceKindError(ConfigurationError):
    """Raised when the desired state declares a kind the service cannot manage."""

    def __init__(self, kind: ResourceKind, app: App) -> None:
        super().__init__(f"{app} does not support managing {kind} resources")
        self.kind = kind
        self.app = app


@dataclass(slots=True, kw_only=True)
class ReconciliationPlan:
    """Changes a reconciliation pass would make, computed without side effects."""

    app: App
    owner_tag: int | None
    changes: ChangeSet = field(default_factory=ChangeSet)
    direct: ChangeSet = field(default_factory=ChangeSet)
    unplanned: list[ResourceKind] = field(default_factory=list[ResourceKind])

    def is_empty(self) -> bool:
        return self.changes.is_empty() and self.direct.is_empty()

    @property
    def complete(self) -> bool:
        return not self.unplanned

    def combined(self) -> ChangeSet:
        combined = ChangeSet()
        combined.extend(self.changes)
        combined.extend(self.direct)
        return combined


@dataclass(slots=True, kw_only=True)
class ReconcileReport:
    service: ServiceInfo
    plan: ReconciliationPlan
    result: ApplyResult

    @property
    def success(self) -> bool:
        return self.result.success


class ReconciliationEngine:
    def __init__(
        self,
        adapter: ServiceAdapter,
        specs: Mapping[ResourceKind, ResourceSpec] = DEFAULT_SPECS,
        marker: str = OWNERSHIP_TAG,
    ) -> None:
        self.adapter = adapter
        self.specs = specs
        self.tags = OwnershipTagManager(adapter, marker)

    def validate(self, desired: DesiredState) -> None:
        """Reject an invalid desired state before any request is made."""

        if desired.version != DESIRED_STATE_VERSION:
            raise ConfigurationError(
                f"Unsupported desired state version {desired.version!r}; "
                f"expected {DESIRED_STATE_VERSION!r}"
            )
        if desired.app != self.adapter.app:
            raise ConfigurationError(
                f"Desired state targets {desired.app}, adapter manages {self.adapter.app}"
            )

        supported = self.adapter.supported_kinds()
        for kind in desired.declared_kinds():
            if kind not in supported or kind not in self.specs:
                raise UnsupportedResourceKindError(kind, self.adapter.app)
            spec = self.specs[kind]
            resources = desired.resources_of(kind)
            index_desired(resources, spec)
            if spec.ownership is Ownership.NAME_PREFIX:
                _require_prefix(resources, spec)

    def plan(self, desired: DesiredState) -> ReconciliationPlan:
        """Compute the pending changes without modifying the service.

        The ownership tag is only looked up, never created; when it does not
        exist yet nothing on the service counts as tag-owned.
        """

        self.validate(desired)
        try:
            owner: int | None = self.tags.resolve_tag()
        except TagNotFoundError:
            log.info(f"Ownership tag {self.tags.marker!r} does not exist yet")
            owner = None
        return self._build_plan(desired, owner)

    def reconcile(
        self,
        desired: DesiredState,
        *,
        cancel: CancelCheck | None = None,
    ) -> ReconcileReport:
        """Converge the service towards ``desired`` and report the outcome."""

        self.validate(desired)
        service = self.adapter.connect()
        if cancel is not None and cancel():
            plan = ReconciliationPlan(
                app=desired.app, owner_tag=None, unplanned=_declared_order(desired)
            )
            log.warning(f"{desired.app}: cancelled before planning")
            return ReconcileReport(
                service=service, plan=plan, result=ApplyResult(skipped=len(plan.unplanned))
            )
        owner = self.tags.ensure_tag()
        plan = self._build_plan(desired, owner, cancel=cancel)

        result = apply_changes(
            plan.changes,
            create=self.adapter.apply_create,
            update=self.adapter.apply_update,
            delete=self.adapter.apply_delete,
            cancel=cancel,
        )
        direct = apply_changes(
            plan.direct,
            create=self.adapter.apply_create,
            update=self.adapter.apply_update,
            delete=self.adapter.apply_delete,
            cancel=cancel,
        )
        result = result.merge(direct)
        result.skipped += len(plan.unplanned)

        log.info(
            f"{service.app}: applied {result.applied}, failed {result.failed}, "
            f"skipped {result.skipped}"
        )
        return ReconcileReport(service=service, plan=plan, result=result)

    def _build_plan(
        self,
        desired: DesiredState,
        owner: int | None,
        *,
        cancel: CancelCheck | None = None,
    ) -> ReconciliationPlan:
        plan = ReconciliationPlan(app=desired.app, owner_tag=owner)
        kinds = _declared_order(desired)

        for position, kind in enumerate(kinds):
            if cancel is not None and cancel():
                plan.unplanned.extend(kinds[position:])
                log.warning(
                    f"{desired.app}: cancelled while planning; "
                    f"not fetched: {', '.join(plan.unplanned)}"
                )
                break
            spec = self.specs[kind]
            current = self.adapter.fetch_current(kind)
            wanted = _stamp_owner(desired.resources_of(kind), spec, owner)
            if kind in DIRECT_KINDS:
                plan.direct.extend(plan_direct(current, wanted, spec, owner=owner))
            else:
                plan.changes.extend(diff_resources(current, wanted, spec, owner=owner))

        log.info(f"{desired.app}: planned {plan.changes.summary()}")
        if not plan.direct.is_empty():
            log.info(f"{desired.app}: planned direct {plan.direct.summary()}")
        for change in plan.changes.skipped + plan.direct.skipped:
            log.warning(f"Skipping {change.describe()}: {change.reason}")
        return plan


def _declared_order(desired: DesiredState) -> list[ResourceKind]:
    return [kind for kind in (*KIND_ORDER, *DIRECT_KINDS) if desired.declares(kind)]


def _stamp_owner(
    resources: Sequence[Resource],
    spec: ResourceSpec,
    owner: int | None,
) -> list[Resource]:
    if spec.ownership is not Ownership.TAG or owner is None:
        return list(resources)
    return [resource.with_tag(owner) for resource in resources]


def _require_prefix(resources: Sequence[Resource], spec: ResourceSpec) -> None:
    prefix = spec.name_prefix or MANAGED_NAME_PREFIX
    for resource in resources:
        name = spec.display_name(resource)
        if not name.startswith(prefix):
            raise ConfigurationError(f"{spec.kind} {name!r} must be named with prefix {prefix!r}")
