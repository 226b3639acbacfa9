"""Ports implemented by service adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from arrstate.domain.model import (
        App,
        HealthStatus,
        ResourceKind,
        ServiceInfo,
        Tag,
    )
    from arrstate.domain.model.resources import Resource
    from arrstate.domain.reconciliation.contracts import Change


@runtime_checkable
class TagStore(Protocol):
    """Tag listing and creation on one service instance."""

    def list_tags(self) -> Sequence[Tag]: ...

    def create_tag(self, label: str) -> Tag: ...


@runtime_checkable
class ServiceAdapter(TagStore, Protocol):
    """Everything the reconciliation engine needs from one service instance.

    Every call performs its own request(s); failures are raised and treated
    as opaque by the engine.
    """

    app: App

    def connect(self) -> ServiceInfo: ...

    def health(self) -> HealthStatus: ...

    def supported_kinds(self) -> frozenset[ResourceKind]: ...

    def fetch_current(self, kind: ResourceKind) -> Sequence[Resource]: ...

    def apply_create(self, change: Change) -> None: ...

    def apply_update(self, change: Change) -> None: ...

    def apply_delete(self, change: Change) -> None: ...


__all__ = ["ServiceAdapter", "TagStore"]
