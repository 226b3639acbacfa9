"""Translate Servarr payloads to domain resources and back.

``parse_*`` functions read wire models into the resource model; ``build_*``
functions produce JSON payloads for POST/PUT; ``merge_*`` functions apply a
desired singleton onto the settings document fetched from the service.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from arrstate.domain.model import (
    App,
    Application,
    Authentication,
    AuthenticationMethod,
    AuthenticationRequired,
    CustomFormat,
    DelayProfile,
    DownloadClient,
    DownloadProtocol,
    FormatSpecification,
    HealthIssue,
    HealthIssueType,
    HealthStatus,
    ImportList,
    Indexer,
    IndexerProxy,
    MediaManagement,
    NamingConfig,
    Notification,
    QualityProfile,
    RemotePathMapping,
    RootFolder,
    ServiceInfo,
    SyncLevel,
    Tag,
)

from .schema import (
    ApplicationResource,
    CustomFormatResource,
    DelayProfileResource,
    DownloadClientResource,
    HealthResource,
    ImportListResource,
    IndexerResource,
    IndexerProxyResource,
    NotificationResource,
    ProfileFormatItemResource,
    QualityProfileItemResource,
    QualityProfileResource,
    RemotePathMappingResource,
    RootFolderResource,
    SystemStatusResource,
    TagResource,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .profiles import AppProfile

log = getLogger(__name__)

type Payload = dict[str, object]

_DOWNLOAD_CLIENT_FIELDS = frozenset({"host", "port", "useSsl", "username", "password"})
_INDEXER_FIELDS = frozenset({"baseUrl", "apiKey", "categories", "minimumSeeders"})
_PROXY_FIELDS = frozenset({"host", "port", "username", "password", "requestTimeout"})
_APPLICATION_FIELDS = frozenset({"prowlarrUrl", "baseUrl", "apiKey", "syncCategories"})
# Specification implementations whose "value" field is an enum id.
_NUMERIC_SPECIFICATIONS = frozenset(
    {
        "IndexerFlagSpecification",
        "LanguageSpecification",
        "QualityModifierSpecification",
        "ReleaseTypeSpecification",
        "ResolutionSpecification",
        "SourceSpecification",
    }
)
_AUTH_METHODS = {method.value: method for method in AuthenticationMethod}
_AUTH_REQUIRED = {required.value.lower(): required for required in AuthenticationRequired}
_SYNC_LEVELS = {level.value.lower(): level for level in SyncLevel}


class TranslationError(ValueError):
    """Raised when a desired resource cannot be expressed on the service."""


def _fields(values: Mapping[str, object]) -> list[Payload]:
    return [{"name": name, "value": value} for name, value in values.items()]


def _protocol(value: str) -> DownloadProtocol:
    try:
        return DownloadProtocol(value.lower())
    except ValueError:
        return DownloadProtocol.UNKNOWN


def _as_str(value: object) -> str:
    return "" if value is None else str(value)


def _as_int(value: object, default: int = 0) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float | str):
        return int(value)
    raise TranslationError(f"Expected an integer, got {value!r}")



def _int_set(value: object) -> frozenset[int]:
    if not isinstance(value, list):
        return frozenset()
    return frozenset(_as_int(item) for item in value)

# -- service facts ----------------------------------------------------------


def parse_tag(resource: TagResource) -> Tag:
    return Tag(id=resource.id, label=resource.label)


def parse_service_info(app: App, resource: SystemStatusResource) -> ServiceInfo:
    return ServiceInfo(
        app=app,
        version=resource.version,
        instance_name=resource.instance_name,
        start_time=resource.start_time,
    )


def parse_health(resources: Iterable[HealthResource]) -> HealthStatus:
    issues: list[HealthIssue] = []
    for resource in resources:
        try:
            issue_type = HealthIssueType(resource.type.lower())
        except ValueError:
            log.debug(f"Unknown health issue type {resource.type!r}; treating as notice")
            issue_type = HealthIssueType.NOTICE
        issues.append(
            HealthIssue(
                source=resource.source,
                type=issue_type,
                message=resource.message,
                wiki_url=resource.wiki_url,
            )
        )
    return HealthStatus(issues=tuple(issues))


# -- custom formats -----------------------------------------------------------


def parse_custom_format(resource: CustomFormatResource) -> CustomFormat:
    specifications = tuple(
        FormatSpecification(
            name=spec.name,
            implementation=spec.implementation,
            negate=spec.negate,
            required=spec.required,
            value=_as_str({item.name: item.value for item in spec.fields}.get("value")),
        )
        for spec in resource.specifications
    )
    return CustomFormat(
        server_id=resource.id,
        name=resource.name,
        include_when_renaming=resource.include_custom_format_when_renaming,
        specifications=specifications,
    )


def _specification_value(spec: FormatSpecification) -> object:
    if spec.implementation in _NUMERIC_SPECIFICATIONS and spec.value.lstrip("-").isdigit():
        return int(spec.value)
    return spec.value


def build_custom_format(resource: CustomFormat, *, server_id: int | None = None) -> Payload:
    payload: Payload = {
        "name": resource.name,
        "includeCustomFormatWhenRenaming": resource.include_when_renaming,
        "specifications": [
            {
                "name": spec.name,
                "implementation": spec.implementation,
                "negate": spec.negate,
                "required": spec.required,
                "fields": [{"name": "value", "value": _specification_value(spec)}],
            }
            for spec in resource.specifications
        ],
    }
    if server_id is not None:
        payload["id"] = server_id
    return payload


# -- quality profiles -----------------------------------------------------------


def parse_quality_profile(resource: QualityProfileResource) -> QualityProfile:
    cutoff = next(
        (item.label for item in resource.items if item.item_id == resource.cutoff),
        str(resource.cutoff),
    )
    return QualityProfile(
        server_id=resource.id,
        name=resource.name,
        cutoff=cutoff,
        allowed_qualities=frozenset(item.label for item in resource.items if item.allowed),
        upgrade_allowed=resource.upgrade_allowed,
        min_format_score=resource.min_format_score,
        cutoff_format_score=resource.cutoff_format_score,
        format_scores={item.name: item.score for item in resource.format_items if item.score},
    )


def _allow_item(item: QualityProfileItemResource, allowed: bool) -> QualityProfileItemResource:
    children = [child.model_copy(update={"allowed": allowed}) for child in item.items]
    return item.model_copy(update={"allowed": allowed, "items": children})


def build_quality_profile(
    template: QualityProfileResource,
    resource: QualityProfile,
    formats: Sequence[CustomFormatResource],
    *,
    server_id: int | None = None,
) -> Payload:
    """Fill a profile template (schema or existing profile) with ``resource``."""

    labels = {item.label for item in template.items}
    unknown = sorted(resource.allowed_qualities - labels)
    if unknown:
        raise TranslationError(f"Unknown qualities for profile {resource.name!r}: {unknown}")

    cutoff = next((item for item in template.items if item.label == resource.cutoff), None)
    if cutoff is None or cutoff.item_id is None:
        raise TranslationError(f"Unknown cutoff {resource.cutoff!r} for profile {resource.name!r}")
    if resource.cutoff not in resource.allowed_qualities:
        raise TranslationError(
            f"Cutoff {resource.cutoff!r} is not an allowed quality of {resource.name!r}"
        )

    scores = resource.scored_formats()
    format_ids = {custom_format.name: custom_format.id for custom_format in formats}
    missing = sorted(name for name in scores if name not in format_ids)
    if missing:
        raise TranslationError(f"Unknown custom formats for profile {resource.name!r}: {missing}")

    profile = template.model_copy(
        update={
            "id": server_id,
            "name": resource.name,
            "upgrade_allowed": resource.upgrade_allowed,
            "cutoff": cutoff.item_id,
            "items": [
                _allow_item(item, item.label in resource.allowed_qualities)
                for item in template.items
            ],
            "min_format_score": resource.min_format_score,
            "cutoff_format_score": resource.cutoff_format_score,
            "format_items": [
                ProfileFormatItemResource(
                    format=custom_format.id,
                    name=custom_format.name,
                    score=scores.get(custom_format.name, 0),
                )
                for custom_format in formats
                if custom_format.id is not None
            ],
        }
    )
    return profile.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- root folders and remote path mappings ----------------------------------------


def parse_root_folder(resource: RootFolderResource) -> RootFolder:
    return RootFolder(
        server_id=resource.id,
        path=resource.path,
        name=resource.name,
        default_quality_profile_id=resource.default_quality_profile_id,
        default_metadata_profile_id=resource.default_metadata_profile_id,
    )


def build_root_folder(resource: RootFolder, profile: AppProfile) -> Payload:
    payload: Payload = {"path": resource.path}
    if profile.root_folder_requires_name:
        folder = resource.path.rstrip("/").rsplit("/", 1)[-1]
        payload["name"] = resource.name or folder or resource.path
        payload["defaultMonitorOption"] = "all"
    if resource.default_quality_profile_id is not None:
        payload["defaultQualityProfileId"] = resource.default_quality_profile_id
    if resource.default_metadata_profile_id is not None:
        payload["defaultMetadataProfileId"] = resource.default_metadata_profile_id
    return payload


def parse_remote_path_mapping(resource: RemotePathMappingResource) -> RemotePathMapping:
    return RemotePathMapping(
        server_id=resource.id,
        host=resource.host,
        remote_path=resource.remote_path,
        local_path=resource.local_path,
    )


def build_remote_path_mapping(
    resource: RemotePathMapping, *, server_id: int | None = None
) -> Payload:
    payload: Payload = {
        "host": resource.host,
        "remotePath": resource.remote_path,
        "localPath": resource.local_path,
    }
    if server_id is not None:
        payload["id"] = server_id
    return payload


# -- download clients, indexers, notifications ------------------------------------


def parse_download_client(resource: DownloadClientResource, profile: AppProfile) -> DownloadClient:
    values = resource.field_map()
    known = _DOWNLOAD_CLIENT_FIELDS | {profile.category_field}
    return DownloadClient(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        protocol=_protocol(resource.protocol),
        enable=resource.enable,
        priority=resource.priority,
        host=_as_str(values.get("host")),
        port=_as_int(values.get("port")),
        use_tls=bool(values.get("useSsl")),
        username=_as_str(values.get("username")),
        category=_as_str(values.get(profile.category_field)),
        remove_completed_downloads=resource.remove_completed_downloads,
        remove_failed_downloads=resource.remove_failed_downloads,
        settings={name: value for name, value in values.items() if name not in known},
    )


def build_download_client(
    resource: DownloadClient,
    profile: AppProfile,
    *,
    server_id: int | None = None,
) -> Payload:
    values: dict[str, object] = {
        "host": resource.host,
        "port": resource.port,
        "useSsl": resource.use_tls,
        "username": resource.username,
        profile.category_field: resource.category,
    }
    if resource.password:
        values["password"] = resource.password
    values.update(resource.settings)
    payload: Payload = {
        "name": resource.name,
        "implementation": resource.implementation,
        "configContract": resource.config_contract,
        "protocol": resource.protocol.value,
        "enable": resource.enable,
        "priority": resource.priority,
        "removeCompletedDownloads": resource.remove_completed_downloads,
        "removeFailedDownloads": resource.remove_failed_downloads,
        "tags": sorted(resource.tags),
        "fields": _fields(values),
    }
    if server_id is not None:
        payload["id"] = server_id
    return payload


def parse_indexer(resource: IndexerResource) -> Indexer:
    values = resource.field_map()
    seeders = values.get("minimumSeeders")
    return Indexer(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        protocol=_protocol(resource.protocol),
        enable=resource.enable,
        priority=resource.priority,
        url=_as_str(values.get("baseUrl")),
        categories=_int_set(values.get("categories")),
        minimum_seeders=None if seeders is None else _as_int(seeders),
        enable_rss=resource.enable_rss,
        enable_automatic_search=resource.enable_automatic_search,
        enable_interactive_search=resource.enable_interactive_search,
        definition=resource.definition_name,
        settings={name: value for name, value in values.items() if name not in _INDEXER_FIELDS},
    )


def build_indexer(resource: Indexer, *, server_id: int | None = None) -> Payload:
    values: dict[str, object] = {
        "baseUrl": resource.url,
        "categories": sorted(resource.categories),
    }
    if resource.api_key:
        values["apiKey"] = resource.api_key
    if resource.minimum_seeders is not None:
        values["minimumSeeders"] = resource.minimum_seeders
    values.update(resource.settings)
    payload: Payload = {
        "name": resource.name,
        "implementation": resource.implementation,
        "configContract": resource.config_contract,
        "protocol": resource.protocol.value,
        "enable": resource.enable,
        "priority": resource.priority,
        "enableRss": resource.enable_rss,
        "enableAutomaticSearch": resource.enable_automatic_search,
        "enableInteractiveSearch": resource.enable_interactive_search,
        "tags": sorted(resource.tags),
        "fields": _fields(values),
    }
    if resource.definition is not None:
        payload["definitionName"] = resource.definition
    if server_id is not None:
        payload["id"] = server_id
    return payload


def parse_notification(resource: NotificationResource) -> Notification:
    return Notification(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        triggers=resource.triggers(),
        include_health_warnings=resource.include_health_warnings,
        settings=resource.field_map(),
    )


def build_notification(resource: Notification, *, server_id: int | None = None) -> Payload:
    payload: Payload = {
        "name": resource.name,
        "implementation": resource.implementation,
        "configContract": resource.config_contract,
        "includeHealthWarnings": resource.include_health_warnings,
        "tags": sorted(resource.tags),
        "fields": _fields(resource.settings),
    }
    for trigger in sorted(resource.triggers):
        payload[trigger] = True
    if server_id is not None:
        payload["id"] = server_id
    return payload


# -- Prowlarr indexer proxies and applications --------------------------------------


def parse_indexer_proxy(resource: IndexerProxyResource) -> IndexerProxy:
    values = resource.field_map()
    port = values.get("port")
    timeout = values.get("requestTimeout")
    return IndexerProxy(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        host=_as_str(values.get("host")),
        port=None if port is None else _as_int(port),
        username=_as_str(values.get("username")),
        request_timeout=None if timeout is None else _as_int(timeout),
        settings={name: value for name, value in values.items() if name not in _PROXY_FIELDS},
    )


def build_indexer_proxy(resource: IndexerProxy, *, server_id: int | None = None) -> Payload:
    values: dict[str, object] = {"host": resource.host}
    if resource.port is not None:
        values["port"] = resource.port
    if resource.username:
        values["username"] = resource.username
    if resource.password:
        values["password"] = resource.password
    if resource.request_timeout is not None:
        values["requestTimeout"] = resource.request_timeout
    values.update(resource.settings)
    payload: Payload = {
        "name": resource.name,
        "implementation": resource.implementation,
        "configContract": resource.config_contract,
        "tags": sorted(resource.tags),
        "fields": _fields(values),
    }
    if server_id is not None:
        payload["id"] = server_id
    return payload


def parse_application(resource: ApplicationResource) -> Application:
    values = resource.field_map()
    sync_level = _SYNC_LEVELS.get(resource.sync_level.lower())
    if sync_level is None:
        raise TranslationError(
            f"Application {resource.name!r} has unknown sync level {resource.sync_level!r}"
        )
    return Application(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        sync_level=sync_level,
        url=_as_str(values.get("baseUrl")),
        prowlarr_url=_as_str(values.get("prowlarrUrl")),
        sync_categories=_int_set(values.get("syncCategories")),
        settings={
            name: value for name, value in values.items() if name not in _APPLICATION_FIELDS
        },
    )


def build_application(resource: Application, *, server_id: int | None = None) -> Payload:
    values: dict[str, object] = {
        "prowlarrUrl": resource.prowlarr_url,
        "baseUrl": resource.url,
        "syncCategories": sorted(resource.sync_categories),
    }
    if resource.api_key:
        values["apiKey"] = resource.api_key
    values.update(resource.settings)
    payload: Payload = {
        "name": resource.name,
        "implementation": resource.implementation,
        "configContract": resource.config_contract,
        "syncLevel": resource.sync_level.value,
        "tags": sorted(resource.tags),
        "fields": _fields(values),
    }
    if server_id is not None:
        payload["id"] = server_id
    return payload


# -- delay profiles -------------------------------------------------------------


def parse_delay_profile(resource: DelayProfileResource) -> DelayProfile:
    return DelayProfile(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        order=resource.order,
        preferred_protocol=_protocol(resource.preferred_protocol),
        usenet_delay=resource.usenet_delay,
        torrent_delay=resource.torrent_delay,
        enable_usenet=resource.enable_usenet,
        enable_torrent=resource.enable_torrent,
        bypass_if_highest_quality=resource.bypass_if_highest_quality,
        bypass_if_above_custom_format_score=resource.bypass_if_above_custom_format_score,
        minimum_custom_format_score=resource.minimum_custom_format_score,
    )


def build_delay_profile(resource: DelayProfile, *, server_id: int | None = None) -> Payload:
    payload = DelayProfileResource(
        id=server_id,
        order=resource.order,
        preferred_protocol=resource.preferred_protocol.value,
        usenet_delay=resource.usenet_delay,
        torrent_delay=resource.torrent_delay,
        enable_usenet=resource.enable_usenet,
        enable_torrent=resource.enable_torrent,
        bypass_if_highest_quality=resource.bypass_if_highest_quality,
        bypass_if_above_custom_format_score=resource.bypass_if_above_custom_format_score,
        minimum_custom_format_score=resource.minimum_custom_format_score,
        tags=sorted(resource.tags),
    )
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- import lists ---------------------------------------------------------------


def parse_import_list(resource: ImportListResource, profile: AppProfile) -> ImportList:
    mapped = {attr: resource.extra(wire) for attr, wire in profile.import_list_fields.items()}
    monitor = mapped.get("monitor")
    availability = mapped.get("minimum_availability")
    return ImportList(
        server_id=resource.id,
        tags=frozenset(resource.tags),
        name=resource.name,
        implementation=resource.implementation,
        enabled=bool(mapped.get("enabled", True)),
        enable_auto=bool(mapped.get("enable_auto", True)),
        search_on_add=bool(mapped.get("search_on_add", True)),
        root_folder_path=resource.root_folder_path,
        monitor=None if monitor is None else str(monitor),
        minimum_availability=None if availability is None else str(availability),
        settings=resource.field_map(),
    )


def build_import_list(
    schema: ImportListResource,
    resource: ImportList,
    profile: AppProfile,
    *,
    quality_profile_id: int,
    metadata_profile_id: int | None = None,
    server_id: int | None = None,
) -> Payload:
    """Fill the service's import list schema for ``resource.implementation``."""

    schema_fields = {item.name for item in schema.fields}
    for name in resource.settings:
        if name not in schema_fields:
            log.warning(f"Import list {resource.name!r}: ignoring unknown setting {name!r}")
    fields = [
        {"name": item.name, "value": resource.settings.get(item.name, item.value)}
        for item in schema.fields
    ]

    payload = schema.model_dump(mode="json", by_alias=True, exclude_none=True)
    payload.update(
        {
            "name": resource.name,
            "implementation": resource.implementation,
            "configContract": schema.config_contract or f"{resource.implementation}Settings",
            "rootFolderPath": resource.root_folder_path,
            "qualityProfileId": quality_profile_id,
            "tags": sorted(resource.tags),
            "fields": fields,
        }
    )
    values: dict[str, object] = {
        "enabled": resource.enabled,
        "enable_auto": resource.enable_auto,
        "search_on_add": resource.search_on_add,
        "monitor": resource.monitor,
        "minimum_availability": resource.minimum_availability,
    }
    for attr, wire in profile.import_list_fields.items():
        value = values[attr]
        if value is not None:
            payload[wire] = value
    if profile.uses_metadata_profiles and metadata_profile_id is not None:
        if not payload.get("metadataProfileId"):
            payload["metadataProfileId"] = metadata_profile_id
    if server_id is None:
        payload.pop("id", None)
    else:
        payload["id"] = server_id
    return payload


# -- settings singletons ----------------------------------------------------------


def parse_naming(payload: Mapping[str, object], profile: AppProfile) -> NamingConfig:
    return NamingConfig(
        server_id=_optional_id(payload),
        rename=bool(payload.get(profile.rename_field)),
        replace_illegal_characters=bool(payload.get("replaceIllegalCharacters", True)),
        formats={
            field: _as_str(payload[field])
            for field in profile.naming_format_fields
            if field in payload
        },
    )


def merge_naming(
    payload: Mapping[str, object],
    resource: NamingConfig,
    profile: AppProfile,
) -> Payload:
    unknown = sorted(set(resource.formats) - set(profile.naming_format_fields))
    if unknown:
        raise TranslationError(f"Unknown naming formats for {profile.app}: {unknown}")
    merged = dict(payload)
    merged[profile.rename_field] = resource.rename
    merged["replaceIllegalCharacters"] = resource.replace_illegal_characters
    merged.update(resource.formats)
    return merged


def parse_media_management(payload: Mapping[str, object], profile: AppProfile) -> MediaManagement:
    return MediaManagement(
        server_id=_optional_id(payload),
        recycle_bin=_as_str(payload.get("recycleBin")),
        recycle_bin_cleanup_days=_as_int(payload.get("recycleBinCleanupDays"), 7),
        set_permissions=bool(payload.get("setPermissionsLinux")),
        chmod_folder=_as_str(payload.get("chmodFolder")),
        chown_group=_as_str(payload.get("chownGroup")),
        delete_empty_folders=bool(payload.get("deleteEmptyFolders")),
        create_empty_folders=bool(payload.get(profile.create_empty_folders_field)),
        use_hardlinks=bool(payload.get("copyUsingHardlinks")),
    )


def merge_media_management(
    payload: Mapping[str, object],
    resource: MediaManagement,
    profile: AppProfile,
) -> Payload:
    merged = dict(payload)
    merged.update(
        {
            "recycleBin": resource.recycle_bin,
            "recycleBinCleanupDays": resource.recycle_bin_cleanup_days,
            "setPermissionsLinux": resource.set_permissions,
            "chmodFolder": resource.chmod_folder,
            "chownGroup": resource.chown_group,
            "deleteEmptyFolders": resource.delete_empty_folders,
            profile.create_empty_folders_field: resource.create_empty_folders,
            "copyUsingHardlinks": resource.use_hardlinks,
        }
    )
    return merged


def parse_authentication(payload: Mapping[str, object]) -> Authentication:
    method = _as_str(payload.get("authenticationMethod")).lower() or "none"
    required = _as_str(payload.get("authenticationRequired")).lower() or "enabled"
    return Authentication(
        server_id=_optional_id(payload),
        method=_AUTH_METHODS.get(method, AuthenticationMethod.NONE),
        required=_AUTH_REQUIRED.get(required, AuthenticationRequired.ENABLED),
        username=_as_str(payload.get("username")),
    )


def merge_authentication(payload: Mapping[str, object], resource: Authentication) -> Payload:
    merged = dict(payload)
    merged["authenticationMethod"] = resource.method.value.capitalize()
    required = resource.required.value
    merged["authenticationRequired"] = required[:1].upper() + required[1:]
    if resource.username:
        merged["username"] = resource.username
    if resource.password:
        merged["password"] = resource.password
        merged["passwordConfirmation"] = resource.password
    return merged


def _optional_id(payload: Mapping[str, object]) -> int | None:
    value = payload.get("id")
    return value if isinstance(value, int) else None
