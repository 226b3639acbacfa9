"""Service adapter for Radarr, Sonarr, Lidarr and Prowlarr."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from arrstate.adapters.http_resilience import ResilienceConfig, ResilientClient
from arrstate.domain.model import (
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
    ResourceKind,
    RootFolder,
)
from arrstate.domain.reconciliation import MANAGED_NAME_PREFIX

from .client import ServarrSession
from .profiles import PROFILES
from .schema import (
    ApplicationProfileResource,
    ApplicationResource,
    CustomFormatResource,
    DelayProfileResource,
    DownloadClientResource,
    HealthResource,
    ImportListResource,
    IndexerResource,
    IndexerProxyResource,
    MetadataProfileResource,
    NotificationResource,
    QualityProfileResource,
    RemotePathMappingResource,
    RootFolderResource,
    SystemStatusResource,
    TagResource,
)
from .translator import (
    TranslationError,
    build_application,
    build_custom_format,
    build_delay_profile,
    build_download_client,
    build_import_list,
    build_indexer,
    build_indexer_proxy,
    build_notification,
    build_quality_profile,
    build_remote_path_mapping,
    build_root_folder,
    merge_authentication,
    merge_media_management,
    merge_naming,
    parse_application,
    parse_authentication,
    parse_custom_format,
    parse_delay_profile,
    parse_download_client,
    parse_health,
    parse_import_list,
    parse_indexer,
    parse_indexer_proxy,
    parse_media_management,
    parse_naming,
    parse_notification,
    parse_quality_profile,
    parse_remote_path_mapping,
    parse_root_folder,
    parse_service_info,
    parse_tag,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from arrstate.config import ConnectionConfig
    from arrstate.domain.model import App, HealthStatus, ServiceInfo, Tag
    from arrstate.domain.model.resources import Resource
    from arrstate.domain.reconciliation import Change

    from .profiles import AppProfile

log = getLogger(__name__)

_ENDPOINTS: dict[ResourceKind, str] = {
    ResourceKind.CUSTOM_FORMAT: "customformat",
    ResourceKind.QUALITY_PROFILE: "qualityprofile",
    ResourceKind.ROOT_FOLDER: "rootfolder",
    ResourceKind.DOWNLOAD_CLIENT: "downloadclient",
    ResourceKind.REMOTE_PATH_MAPPING: "remotepathmapping",
    ResourceKind.INDEXER: "indexer",
    ResourceKind.NOTIFICATION: "notification",
    ResourceKind.DELAY_PROFILE: "delayprofile",
    ResourceKind.IMPORT_LIST: "importlist",
    ResourceKind.NAMING_CONFIG: "config/naming",
    ResourceKind.MEDIA_MANAGEMENT: "config/mediamanagement",
    ResourceKind.AUTHENTICATION: "config/host",
    ResourceKind.INDEXER_PROXY: "indexerproxy",
    ResourceKind.APPLICATION: "applications",
}
_SINGLETON_KINDS = frozenset(
    {ResourceKind.NAMING_CONFIG, ResourceKind.MEDIA_MANAGEMENT, ResourceKind.AUTHENTICATION}
)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class ServarrAdapter:
    """Synchronous ``ServiceAdapter`` over the Servarr REST API.

    Each public call opens its own client and runs to completion on a fresh
    event loop; nothing is cached between calls.
    """

    app: App
    connection: ConnectionConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    profile: AppProfile = field(init=False)
    resilience: ResilienceConfig = field(init=False)

    def __post_init__(self) -> None:
        self.profile = PROFILES[self.app]
        self.resilience = self.connection.resilience(name=str(self.app))

    def connect(self) -> ServiceInfo:
        return self._run(self._connect_async)

    def health(self) -> HealthStatus:
        return self._run(self._health_async)

    def list_tags(self) -> Sequence[Tag]:
        return self._run(self._list_tags_async)

    def create_tag(self, label: str) -> Tag:
        async def create(api: ServarrSession) -> Tag:
            created = await api.post_model("tag", {"label": label}, TagResource)
            return parse_tag(created)

        return self._run(create)

    def supported_kinds(self) -> frozenset[ResourceKind]:
        return self.profile.supported_kinds

    def fetch_current(self, kind: ResourceKind) -> Sequence[Resource]:
        async def fetch(api: ServarrSession) -> list[Resource]:
            return await self._fetch_async(api, kind)

        return self._run(fetch)

    def apply_create(self, change: Change) -> None:
        async def create(api: ServarrSession) -> None:
            await self._create_async(api, change)

        self._run(create)

    def apply_update(self, change: Change) -> None:
        async def update(api: ServarrSession) -> None:
            await self._update_async(api, change)

        self._run(update)

    def apply_delete(self, change: Change) -> None:
        async def delete(api: ServarrSession) -> None:
            await self._delete_async(api, change)

        self._run(delete)

    def _run[T](self, operation: Callable[[ServarrSession], Awaitable[T]]) -> T:
        return asyncio.run(self._with_session(operation))

    async def _with_session[T](self, operation: Callable[[ServarrSession], Awaitable[T]]) -> T:
        async with self.client_factory(self.resilience) as client:
            return await operation(ServarrSession(client, self.profile.api_prefix))

    async def _connect_async(self, api: ServarrSession) -> ServiceInfo:
        status = await api.get_model("system/status", SystemStatusResource)
        info = parse_service_info(self.app, status)
        log.info(f"Connected to {self.app} {info.version} at {self.connection.base_url}")
        return info

    async def _health_async(self, api: ServarrSession) -> HealthStatus:
        return parse_health(await api.get_models("health", HealthResource))

    async def _list_tags_async(self, api: ServarrSession) -> list[Tag]:
        return [parse_tag(tag) for tag in await api.get_models("tag", TagResource)]

    async def _fetch_async(self, api: ServarrSession, kind: ResourceKind) -> list[Resource]:
        endpoint = _ENDPOINTS[kind]
        match kind:
            case ResourceKind.CUSTOM_FORMAT:
                formats = await api.get_models(endpoint, CustomFormatResource)
                return [parse_custom_format(item) for item in formats]
            case ResourceKind.QUALITY_PROFILE:
                profiles = await api.get_models(endpoint, QualityProfileResource)
                return [parse_quality_profile(item) for item in profiles]
            case ResourceKind.ROOT_FOLDER:
                folders = await api.get_models(endpoint, RootFolderResource)
                return [parse_root_folder(item) for item in folders]
            case ResourceKind.DOWNLOAD_CLIENT:
                clients = await api.get_models(endpoint, DownloadClientResource)
                return [parse_download_client(item, self.profile) for item in clients]
            case ResourceKind.REMOTE_PATH_MAPPING:
                mappings = await api.get_models(endpoint, RemotePathMappingResource)
                return [parse_remote_path_mapping(item) for item in mappings]
            case ResourceKind.INDEXER:
                indexers = await api.get_models(endpoint, IndexerResource)
                return [parse_indexer(item) for item in indexers]
            case ResourceKind.NOTIFICATION:
                notifications = await api.get_models(endpoint, NotificationResource)
                return [parse_notification(item) for item in notifications]
            case ResourceKind.DELAY_PROFILE:
                delays = await api.get_models(endpoint, DelayProfileResource)
                return [parse_delay_profile(item) for item in delays]
            case ResourceKind.IMPORT_LIST:
                lists = await api.get_models(endpoint, ImportListResource)
                return [parse_import_list(item, self.profile) for item in lists]
            case ResourceKind.NAMING_CONFIG:
                return [parse_naming(await api.get_document(endpoint), self.profile)]
            case ResourceKind.MEDIA_MANAGEMENT:
                document = await api.get_document(endpoint)
                return [parse_media_management(document, self.profile)]
            case ResourceKind.AUTHENTICATION:
                return [parse_authentication(await api.get_document(endpoint))]
            case ResourceKind.INDEXER_PROXY:
                proxies = await api.get_models(endpoint, IndexerProxyResource)
                return [parse_indexer_proxy(item) for item in proxies]
            case ResourceKind.APPLICATION:
                applications = await api.get_models(endpoint, ApplicationResource)
                return [parse_application(item) for item in applications]
            case _:
                raise TranslationError(f"Unsupported resource kind {kind}")

    async def _create_async(self, api: ServarrSession, change: Change) -> None:
        resource = change.payload
        endpoint = _ENDPOINTS[change.kind]
        match resource:
            case CustomFormat():
                await api.post(endpoint, build_custom_format(resource))
            case QualityProfile():
                template = await api.get_model(f"{endpoint}/schema", QualityProfileResource)
                formats = await api.get_models("customformat", CustomFormatResource)
                await api.post(endpoint, build_quality_profile(template, resource, formats))
            case RootFolder():
                await api.post(endpoint, await self._root_folder_payload(api, resource))
            case DownloadClient():
                await api.post(endpoint, build_download_client(resource, self.profile))
            case RemotePathMapping():
                await api.post(endpoint, build_remote_path_mapping(resource))
            case Indexer():
                await api.post(endpoint, await self._indexer_payload(api, resource))
            case Notification():
                await api.post(endpoint, build_notification(resource))
            case DelayProfile():
                await api.post(endpoint, build_delay_profile(resource))
            case ImportList():
                await api.post(endpoint, await self._import_list_payload(api, resource))
            case IndexerProxy():
                await api.post(endpoint, build_indexer_proxy(resource))
            case Application():
                await api.post(endpoint, build_application(resource))
            case _:
                raise TranslationError(f"{change.kind} resources cannot be created")

    async def _update_async(self, api: ServarrSession, change: Change) -> None:
        resource = change.payload
        server_id = change.server_id
        path = f"{_ENDPOINTS[change.kind]}/{server_id}"
        match resource:
            case CustomFormat():
                await api.put(path, build_custom_format(resource, server_id=server_id))
            case QualityProfile():
                template = await api.get_model(path, QualityProfileResource)
                formats = await api.get_models("customformat", CustomFormatResource)
                payload = build_quality_profile(template, resource, formats, server_id=server_id)
                await api.put(path, payload)
            case DownloadClient():
                payload = build_download_client(resource, self.profile, server_id=server_id)
                await api.put(path, payload)
            case RemotePathMapping():
                await api.put(path, build_remote_path_mapping(resource, server_id=server_id))
            case Indexer():
                payload = await self._indexer_payload(api, resource, server_id=server_id)
                await api.put(path, payload)
            case Notification():
                await api.put(path, build_notification(resource, server_id=server_id))
            case DelayProfile():
                await api.put(path, build_delay_profile(resource, server_id=server_id))
            case ImportList():
                payload = await self._import_list_payload(api, resource, server_id=server_id)
                await api.put(path, payload)
            case IndexerProxy():
                await api.put(path, build_indexer_proxy(resource, server_id=server_id))
            case Application():
                await api.put(path, build_application(resource, server_id=server_id))
            case NamingConfig():
                document = await api.get_document(_ENDPOINTS[change.kind])
                await api.put(path, merge_naming(document, resource, self.profile))
            case MediaManagement():
                document = await api.get_document(_ENDPOINTS[change.kind])
                await api.put(path, merge_media_management(document, resource, self.profile))
            case Authentication():
                document = await api.get_document(_ENDPOINTS[change.kind])
                await api.put(path, merge_authentication(document, resource))
            case _:
                raise TranslationError(f"{change.kind} resources cannot be updated")

    async def _delete_async(self, api: ServarrSession, change: Change) -> None:
        if change.kind in _SINGLETON_KINDS:
            raise TranslationError(f"{change.kind} resources cannot be deleted")
        await api.delete(f"{_ENDPOINTS[change.kind]}/{change.server_id}")

    async def _root_folder_payload(
        self,
        api: ServarrSession,
        resource: RootFolder,
    ) -> dict[str, object]:
        payload = build_root_folder(resource, self.profile)
        if not self.profile.uses_metadata_profiles:
            return payload
        if "defaultQualityProfileId" not in payload:
            profiles = await api.get_models("qualityprofile", QualityProfileResource)
            payload["defaultQualityProfileId"] = _pick_quality_profile(profiles, None)
        if "defaultMetadataProfileId" not in payload:
            payload["defaultMetadataProfileId"] = await _default_metadata_profile(api)
        return payload

    async def _indexer_payload(
        self,
        api: ServarrSession,
        resource: Indexer,
        *,
        server_id: int | None = None,
    ) -> dict[str, object]:
        payload = build_indexer(resource, server_id=server_id)
        if self.profile.indexer_app_profiles:
            payload["appProfileId"] = await _app_profile_id(api, server_id)
        return payload

    async def _import_list_payload(
        self,
        api: ServarrSession,
        resource: ImportList,
        *,
        server_id: int | None = None,
    ) -> dict[str, object]:
        schemas = await api.get_models("importlist/schema", ImportListResource)
        schema = next(
            (item for item in schemas if item.implementation == resource.implementation),
            None,
        )
        if schema is None:
            raise TranslationError(
                f"Unknown import list implementation {resource.implementation!r} "
                f"for {resource.name!r}"
            )
        profiles = await api.get_models("qualityprofile", QualityProfileResource)
        metadata_profile_id = (
            await _default_metadata_profile(api) if self.profile.uses_metadata_profiles else None
        )
        return build_import_list(
            schema,
            resource,
            self.profile,
            quality_profile_id=_pick_quality_profile(profiles, resource.quality_profile),
            metadata_profile_id=metadata_profile_id,
            server_id=server_id,
        )


def _pick_quality_profile(profiles: Sequence[QualityProfileResource], name: str | None) -> int:
    """Resolve a quality profile id by name, defaulting to a managed profile."""

    candidates = [(profile.id, profile.name) for profile in profiles if profile.id is not None]
    if name is not None:
        for profile_id, profile_name in candidates:
            if profile_name == name:
                return profile_id
        raise TranslationError(f"Unknown quality profile {name!r}")
    if not candidates:
        raise TranslationError("Service has no quality profiles")
    managed = [entry for entry in candidates if entry[1].startswith(MANAGED_NAME_PREFIX)]
    return (managed or candidates)[0][0]


async def _default_metadata_profile(api: ServarrSession) -> int:
    profiles = await api.get_models("metadataprofile", MetadataProfileResource)
    if not profiles:
        raise TranslationError("Service has no metadata profiles")
    return profiles[0].id


async def _app_profile_id(api: ServarrSession, server_id: int | None) -> int:
    """Keep an existing indexer's app profile, else use the service's first one."""

    if server_id is not None:
        existing = await api.get_document(f"indexer/{server_id}")
        current = existing.get("appProfileId")
        if isinstance(current, int) and current > 0:
            return current
    profiles = await api.get_models("appprofile", ApplicationProfileResource)
    if not profiles:
        raise TranslationError("Service has no app profiles")
    return profiles[0].id
