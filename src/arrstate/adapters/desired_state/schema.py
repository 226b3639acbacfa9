"""Pydantic models for the desired-state document (version ``v1``)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from arrstate.domain.model import (
    DEFAULT_SYNC_CATEGORIES,
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
    ImportList,
    Indexer,
    IndexerProxy,
    MediaManagement,
    NamingConfig,
    Notification,
    QualityProfile,
    RemotePathMapping,
    RootFolder,
    SyncLevel,
)


class DesiredModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class FormatSpecificationDocument(DesiredModel):
    name: str
    implementation: str
    negate: bool = False
    required: bool = False
    value: str | int = ""

    def to_domain(self) -> FormatSpecification:
        return FormatSpecification(
            name=self.name,
            implementation=self.implementation,
            negate=self.negate,
            required=self.required,
            value=str(self.value),
        )


class CustomFormatDocument(DesiredModel):
    name: str
    include_when_renaming: bool = False
    specifications: list[FormatSpecificationDocument] = Field(
        default_factory=list[FormatSpecificationDocument]
    )

    def to_domain(self) -> CustomFormat:
        return CustomFormat(
            name=self.name,
            include_when_renaming=self.include_when_renaming,
            specifications=tuple(spec.to_domain() for spec in self.specifications),
        )


class QualityProfileDocument(DesiredModel):
    name: str
    cutoff: str
    allowed_qualities: list[str] = Field(min_length=1)
    upgrade_allowed: bool = True
    min_format_score: int = 0
    cutoff_format_score: int = 0
    format_scores: dict[str, int] = Field(default_factory=dict[str, int])

    def to_domain(self) -> QualityProfile:
        return QualityProfile(
            name=self.name,
            cutoff=self.cutoff,
            allowed_qualities=frozenset(self.allowed_qualities),
            upgrade_allowed=self.upgrade_allowed,
            min_format_score=self.min_format_score,
            cutoff_format_score=self.cutoff_format_score,
            format_scores=dict(self.format_scores),
        )


class RootFolderDocument(DesiredModel):
    path: str
    name: str | None = None
    default_quality_profile_id: int | None = None
    default_metadata_profile_id: int | None = None

    def to_domain(self) -> RootFolder:
        return RootFolder(
            path=self.path,
            name=self.name,
            default_quality_profile_id=self.default_quality_profile_id,
            default_metadata_profile_id=self.default_metadata_profile_id,
        )


class DownloadClientDocument(DesiredModel):
    name: str
    implementation: str
    protocol: DownloadProtocol
    enable: bool = True
    priority: int = 1
    host: str = ""
    port: int = 0
    use_tls: bool = False
    username: str = ""
    password: str = ""
    category: str = ""
    remove_completed_downloads: bool = True
    remove_failed_downloads: bool = True
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> DownloadClient:
        return DownloadClient(
            name=self.name,
            implementation=self.implementation,
            protocol=self.protocol,
            enable=self.enable,
            priority=self.priority,
            host=self.host,
            port=self.port,
            use_tls=self.use_tls,
            username=self.username,
            password=self.password,
            category=self.category,
            remove_completed_downloads=self.remove_completed_downloads,
            remove_failed_downloads=self.remove_failed_downloads,
            settings=dict(self.settings),
        )


class RemotePathMappingDocument(DesiredModel):
    host: str
    remote_path: str
    local_path: str

    def to_domain(self) -> RemotePathMapping:
        return RemotePathMapping(
            host=self.host,
            remote_path=self.remote_path,
            local_path=self.local_path,
        )


class IndexerDocument(DesiredModel):
    name: str
    implementation: str
    protocol: DownloadProtocol
    enable: bool = True
    priority: int = 25
    url: str = ""
    api_key: str = ""
    categories: list[int] = Field(default_factory=list[int])
    minimum_seeders: int | None = None
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True
    definition: str | None = None
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> Indexer:
        return Indexer(
            name=self.name,
            implementation=self.implementation,
            protocol=self.protocol,
            enable=self.enable,
            priority=self.priority,
            url=self.url,
            api_key=self.api_key,
            categories=frozenset(self.categories),
            minimum_seeders=self.minimum_seeders,
            enable_rss=self.enable_rss,
            enable_automatic_search=self.enable_automatic_search,
            enable_interactive_search=self.enable_interactive_search,
            definition=self.definition,
            settings=dict(self.settings),
        )


class NotificationDocument(DesiredModel):
    name: str
    implementation: str
    triggers: list[str] = Field(default_factory=list[str])
    include_health_warnings: bool = False
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> Notification:
        return Notification(
            name=self.name,
            implementation=self.implementation,
            triggers=frozenset(self.triggers),
            include_health_warnings=self.include_health_warnings,
            settings=dict(self.settings),
        )


class DelayProfileDocument(DesiredModel):
    order: int = Field(ge=1)
    preferred_protocol: DownloadProtocol = DownloadProtocol.USENET
    usenet_delay: int = 0
    torrent_delay: int = 0
    enable_usenet: bool = True
    enable_torrent: bool = True
    bypass_if_highest_quality: bool = False
    bypass_if_above_custom_format_score: bool = False
    minimum_custom_format_score: int = 0
    tags: list[int] = Field(default_factory=list[int])

    def to_domain(self) -> DelayProfile:
        return DelayProfile(
            order=self.order,
            tags=frozenset(self.tags),
            preferred_protocol=self.preferred_protocol,
            usenet_delay=self.usenet_delay,
            torrent_delay=self.torrent_delay,
            enable_usenet=self.enable_usenet,
            enable_torrent=self.enable_torrent,
            bypass_if_highest_quality=self.bypass_if_highest_quality,
            bypass_if_above_custom_format_score=self.bypass_if_above_custom_format_score,
            minimum_custom_format_score=self.minimum_custom_format_score,
        )


class ImportListDocument(DesiredModel):
    name: str
    implementation: str
    enabled: bool = True
    enable_auto: bool = True
    search_on_add: bool = True
    quality_profile: str | None = None
    root_folder_path: str = ""
    monitor: str | None = None
    minimum_availability: str | None = None
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> ImportList:
        return ImportList(
            name=self.name,
            implementation=self.implementation,
            enabled=self.enabled,
            enable_auto=self.enable_auto,
            search_on_add=self.search_on_add,
            quality_profile=self.quality_profile,
            root_folder_path=self.root_folder_path,
            monitor=self.monitor,
            minimum_availability=self.minimum_availability,
            settings=dict(self.settings),
        )


class IndexerProxyDocument(DesiredModel):
    name: str
    implementation: str
    host: str = ""
    port: int | None = None
    username: str = ""
    password: str = ""
    request_timeout: int | None = None
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> IndexerProxy:
        return IndexerProxy(
            name=self.name,
            implementation=self.implementation,
            host=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            request_timeout=self.request_timeout,
            settings=dict(self.settings),
        )


class ApplicationDocument(DesiredModel):
    name: str
    implementation: str
    sync_level: SyncLevel = SyncLevel.FULL_SYNC
    url: str
    prowlarr_url: str
    api_key: str = ""
    sync_categories: list[int] = Field(default_factory=list[int])
    settings: dict[str, object] = Field(default_factory=dict[str, object])

    def to_domain(self) -> Application:
        """An empty ``sync_categories`` means the defaults for the implementation."""

        categories = frozenset(self.sync_categories) or DEFAULT_SYNC_CATEGORIES.get(
            self.implementation, frozenset[int]()
        )
        return Application(
            name=self.name,
            implementation=self.implementation,
            sync_level=self.sync_level,
            url=self.url,
            prowlarr_url=self.prowlarr_url,
            api_key=self.api_key,
            sync_categories=categories,
            settings=dict(self.settings),
        )


class NamingDocument(DesiredModel):
    rename: bool = False
    replace_illegal_characters: bool = True
    formats: dict[str, str] = Field(default_factory=dict[str, str])

    def to_domain(self) -> NamingConfig:
        return NamingConfig(
            rename=self.rename,
            replace_illegal_characters=self.replace_illegal_characters,
            formats=dict(self.formats),
        )


class MediaManagementDocument(DesiredModel):
    recycle_bin: str = ""
    recycle_bin_cleanup_days: int = 7
    set_permissions: bool = False
    chmod_folder: str = "755"
    chown_group: str = ""
    delete_empty_folders: bool = False
    create_empty_folders: bool = False
    use_hardlinks: bool = True

    def to_domain(self) -> MediaManagement:
        return MediaManagement(
            recycle_bin=self.recycle_bin,
            recycle_bin_cleanup_days=self.recycle_bin_cleanup_days,
            set_permissions=self.set_permissions,
            chmod_folder=self.chmod_folder,
            chown_group=self.chown_group,
            delete_empty_folders=self.delete_empty_folders,
            create_empty_folders=self.create_empty_folders,
            use_hardlinks=self.use_hardlinks,
        )


class AuthenticationDocument(DesiredModel):
    method: AuthenticationMethod = AuthenticationMethod.NONE
    required: AuthenticationRequired = AuthenticationRequired.ENABLED
    username: str = ""
    password: str = ""

    def to_domain(self) -> Authentication:
        return Authentication(
            method=self.method,
            required=self.required,
            username=self.username,
            password=self.password,
        )


class DesiredStateDocument(DesiredModel):
    version: str
    app: App
    custom_formats: list[CustomFormatDocument] = Field(default_factory=list[CustomFormatDocument])
    quality_profiles: list[QualityProfileDocument] = Field(
        default_factory=list[QualityProfileDocument]
    )
    root_folders: list[RootFolderDocument] = Field(default_factory=list[RootFolderDocument])
    download_clients: list[DownloadClientDocument] = Field(
        default_factory=list[DownloadClientDocument]
    )
    remote_path_mappings: list[RemotePathMappingDocument] = Field(
        default_factory=list[RemotePathMappingDocument]
    )
    indexers: list[IndexerDocument] = Field(default_factory=list[IndexerDocument])
    notifications: list[NotificationDocument] = Field(default_factory=list[NotificationDocument])
    delay_profiles: list[DelayProfileDocument] = Field(default_factory=list[DelayProfileDocument])
    import_lists: list[ImportListDocument] = Field(default_factory=list[ImportListDocument])
    indexer_proxies: list[IndexerProxyDocument] = Field(
        default_factory=list[IndexerProxyDocument]
    )
    applications: list[ApplicationDocument] = Field(default_factory=list[ApplicationDocument])
    naming: NamingDocument | None = None
    media_management: MediaManagementDocument | None = None
    authentication: AuthenticationDocument | None = None
