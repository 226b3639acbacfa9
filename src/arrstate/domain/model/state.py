"""Desired configuration for one service instance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import ResourceKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .enums import App
    from .resources import (
        Application,
        Authentication,
        CustomFormat,
        DelayProfile,
        DownloadClient,
        ImportList,
        Indexer,
        IndexerProxy,
        MediaManagement,
        NamingConfig,
        Notification,
        QualityProfile,
        RemotePathMapping,
        Resource,
        RootFolder,
    )

DESIRED_STATE_VERSION = "v1"

_COLLECTIONS: dict[ResourceKind, str] = {
    ResourceKind.CUSTOM_FORMAT: "custom_formats",
    ResourceKind.QUALITY_PROFILE: "quality_profiles",
    ResourceKind.ROOT_FOLDER: "root_folders",
    ResourceKind.DOWNLOAD_CLIENT: "download_clients",
    ResourceKind.REMOTE_PATH_MAPPING: "remote_path_mappings",
    ResourceKind.INDEXER: "indexers",
    ResourceKind.NOTIFICATION: "notifications",
    ResourceKind.DELAY_PROFILE: "delay_profiles",
    ResourceKind.IMPORT_LIST: "import_lists",
    ResourceKind.INDEXER_PROXY: "indexer_proxies",
    ResourceKind.APPLICATION: "applications",
}

_SINGLETONS: dict[ResourceKind, str] = {
    ResourceKind.NAMING_CONFIG: "naming",
    ResourceKind.MEDIA_MANAGEMENT: "media_management",
    ResourceKind.AUTHENTICATION: "authentication",
}

KIND_FIELDS: dict[ResourceKind, str] = {**_COLLECTIONS, **_SINGLETONS}


@dataclass(frozen=True, slots=True, kw_only=True)
class DesiredState:
    """Materialized desired configuration.

    Only declared kinds are reconciled. When ``managed_kinds`` is unset a kind
    is declared by having resources, so an empty collection leaves the service
    alone. When it is set, a listed kind with no resources removes every
    managed resource of that kind.
    """

    app: App
    version: str = DESIRED_STATE_VERSION
    managed_kinds: frozenset[ResourceKind] | None = None
    custom_formats: tuple[CustomFormat, ...] = ()
    quality_profiles: tuple[QualityProfile, ...] = ()
    root_folders: tuple[RootFolder, ...] = ()
    download_clients: tuple[DownloadClient, ...] = ()
    remote_path_mappings: tuple[RemotePathMapping, ...] = ()
    indexers: tuple[Indexer, ...] = ()
    notifications: tuple[Notification, ...] = ()
    delay_profiles: tuple[DelayProfile, ...] = ()
    import_lists: tuple[ImportList, ...] = ()
    indexer_proxies: tuple[IndexerProxy, ...] = ()
    applications: tuple[Application, ...] = ()
    naming: NamingConfig | None = None
    media_management: MediaManagement | None = None
    authentication: Authentication | None = None

    def resources_of(self, kind: ResourceKind) -> Sequence[Resource]:
        if kind in _COLLECTIONS:
            return getattr(self, _COLLECTIONS[kind])
        singleton = getattr(self, _SINGLETONS[kind])
        return () if singleton is None else (singleton,)

    def declares(self, kind: ResourceKind) -> bool:
        """Whether the document takes responsibility for ``kind``."""

        if self.managed_kinds is not None:
            return kind in self.managed_kinds
        return bool(self.resources_of(kind))

    def declared_kinds(self) -> tuple[ResourceKind, ...]:
        return tuple(kind for kind in ResourceKind if self.declares(kind))
